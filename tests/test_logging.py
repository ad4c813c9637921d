"""Tests for the logging module."""

import copy
import json

import pytest

from logicflow import logging as flow_logging
from logicflow.logging import (
    JsonlSink,
    LogLevel,
    NullSink,
    configure_logging,
    emit_record,
    get_logger,
    install_record_sink,
    open_record_sink,
    parse_level,
)


@pytest.fixture(autouse=True)
def restore_settings():
    saved = copy.deepcopy(flow_logging._settings)
    yield
    flow_logging._settings.clear()
    flow_logging._settings.update(saved)
    flow_logging.close_record_sink()


class TestFlowLogger:

    def test_format(self, capsys):
        configure_logging(level='DEBUG')
        get_logger('compiler').debug("compiled %s", "cube")

        assert capsys.readouterr().out == "[compiler] DEBUG: compiled cube\n"

    def test_level_filtering(self, capsys):
        configure_logging(level='WARNING')
        log = get_logger('compiler')
        log.info("hidden")
        log.warning("shown")

        assert capsys.readouterr().out == "[compiler] WARN: shown\n"

    def test_module_level_override(self, capsys):
        configure_logging(level='ERROR', modules={'runtime': 'DEBUG'})
        get_logger('runtime').debug("yes")
        get_logger('scene').debug("no")

        assert capsys.readouterr().out == "[runtime] DEBUG: yes\n"

    def test_off_silences_errors(self, capsys):
        configure_logging(level='OFF')
        get_logger('runtime').error("nothing")

        assert capsys.readouterr().out == ""

    def test_loggers_are_cached(self):
        assert get_logger('runtime') is get_logger('runtime')

    def test_step_tracing(self, capsys):
        configure_logging(level='DEBUG', steps=False)
        get_logger('runtime').step('cube', 'Move')
        assert capsys.readouterr().out == ""

        configure_logging(level='DEBUG', steps=True)
        get_logger('runtime').step('cube', 'Move')
        assert capsys.readouterr().out == "[runtime] STEP: cube: 'Move'\n"

    def test_bad_format_args_do_not_raise(self, capsys):
        configure_logging(level='INFO')
        get_logger('x').info("%d items", "many")
        assert "many" in capsys.readouterr().out

    def test_log_traceback(self, capsys):
        configure_logging(level='ERROR')
        try:
            raise ValueError("boom")
        except ValueError as e:
            get_logger('runtime').log_traceback(e)

        out = capsys.readouterr().out
        assert "[runtime] TRACE: ValueError: boom" in out


class TestLevels:

    @pytest.mark.parametrize("name, expected", [
        ("debug", LogLevel.DEBUG),
        ("WARN", LogLevel.WARNING),
        (" error ", LogLevel.ERROR),
        ("off", LogLevel.OFF),
        ("LOUD", LogLevel.INFO),
    ])
    def test_parse_level(self, name, expected):
        assert parse_level(name) == expected

    def test_env(self):
        flow_logging._load_env({
            'LOGICFLOW_LOG_LEVEL': 'ERROR',
            'LOGICFLOW_LOG_RUNTIME': 'DEBUG',
            'LOGICFLOW_LOG_STEPS': 'yes',
            'LOGICFLOW_LOG_RECORDS': '1',
            'LOGICFLOW_LOG_DIR': '/tmp/flow',
            'OTHER_LOG_LEVEL': 'DEBUG',
        })

        assert get_logger('compiler').level == LogLevel.ERROR
        assert get_logger('runtime').level == LogLevel.DEBUG
        assert flow_logging._settings['steps'] is True
        assert flow_logging._settings['records'] is True
        assert str(flow_logging.get_log_dir()) == '/tmp/flow'
        assert 'dir' not in flow_logging._settings['modules']


class TestRecords:

    def test_dropped_without_sink(self):
        assert emit_record('runtime', {'type': 'x'}) is False

    def test_jsonl_sink(self, tmp_path):
        path = tmp_path / "run" / "records.jsonl"
        install_record_sink(JsonlSink(path))

        assert emit_record('runtime', {'type': 'instance_started', 'instance': 1})
        flow_logging.close_record_sink()

        (line,) = [json.loads(text) for text in path.read_text().splitlines()]
        assert line['type'] == 'instance_started'
        assert line['module'] == 'runtime'
        assert 'wall_time' in line

    def test_unused_jsonl_sink_creates_no_file(self, tmp_path):
        JsonlSink(tmp_path / "records.jsonl").close()
        assert list(tmp_path.iterdir()) == []

    def test_replacing_a_sink_closes_it(self, tmp_path):
        first = JsonlSink(tmp_path / "a.jsonl")
        install_record_sink(first)
        emit_record('runtime', {'type': 'x'})

        install_record_sink(NullSink())

        assert first._file is None

    def test_open_record_sink(self, tmp_path):
        assert isinstance(open_record_sink(), NullSink)
        assert open_record_sink(tmp_path / "x.jsonl").path == tmp_path / "x.jsonl"

        flow_logging._settings.update(records=True, log_dir=str(tmp_path))
        sink = open_record_sink()

        assert isinstance(sink, JsonlSink)
        assert sink.path.parent == tmp_path
