"""Tests for the behavior graph models."""

import pytest
from pydantic import ValidationError

from models import (
    ActionType,
    BehaviorGraph,
    LogicAction,
    SceneObjectData,
    Trigger,
    Vector3,
    default_params,
)


class TestDefaultGraph:
    """Graphs of newly created objects."""

    def test_default_has_start_and_click(self):
        graph = BehaviorGraph.default()

        assert [e.type for e in graph.events] == [Trigger.ON_START, Trigger.ON_CLICK]
        assert all(e.actions == [] for e in graph.events)
        assert graph.is_empty()

    def test_default_graphs_are_independent(self):
        a = BehaviorGraph.default()
        b = BehaviorGraph.default()
        a.add_action(Trigger.ON_START, ActionType.WAIT)

        assert b.is_empty()


class TestEditOperations:
    """Append, delete, reorder and param updates."""

    @pytest.fixture
    def graph(self):
        return BehaviorGraph.default()

    def test_add_action_uses_editor_defaults(self, graph):
        action = graph.add_action(Trigger.ON_CLICK, ActionType.ROTATE)

        assert action.type == "ROTATE"
        assert action.params == {"axis": "y", "amount": 90}
        assert graph.event_for(Trigger.ON_CLICK).actions == [action]

    def test_add_action_with_params(self, graph):
        action = graph.add_action(Trigger.ON_START, "MOVE", {"axis": "z", "amount": 3})
        assert action.params == {"axis": "z", "amount": 3}

    def test_add_unknown_type_keeps_it(self, graph):
        action = graph.add_action(Trigger.ON_START, "TELEPORT")
        assert action.type == "TELEPORT"
        assert action.params == {}

    def test_action_ids_unique(self, graph):
        ids = {graph.add_action(Trigger.ON_START, ActionType.WAIT).id for _ in range(50)}
        assert len(ids) == 50

    def test_add_preserves_insertion_order(self, graph):
        types = ["MOVE", "WAIT", "COLOR", "VISIBLE"]
        for t in types:
            graph.add_action(Trigger.ON_START, t)

        assert [a.type for a in graph.event_for(Trigger.ON_START).actions] == types

    def test_remove_action(self, graph):
        keep = graph.add_action(Trigger.ON_START, "MOVE")
        drop = graph.add_action(Trigger.ON_START, "WAIT")

        removed = graph.remove_action(drop.id)

        assert removed is drop
        assert graph.event_for(Trigger.ON_START).actions == [keep]

    def test_remove_unknown_action_raises(self, graph):
        with pytest.raises(KeyError):
            graph.remove_action("missing")

    def test_move_action_reorders(self, graph):
        a = graph.add_action(Trigger.ON_CLICK, "MOVE")
        b = graph.add_action(Trigger.ON_CLICK, "WAIT")
        c = graph.add_action(Trigger.ON_CLICK, "COLOR")

        graph.move_action(Trigger.ON_CLICK, 2, 0)

        assert graph.event_for(Trigger.ON_CLICK).actions == [c, a, b]

    def test_move_action_out_of_range(self, graph):
        graph.add_action(Trigger.ON_CLICK, "MOVE")
        with pytest.raises(IndexError):
            graph.move_action(Trigger.ON_CLICK, 0, 3)

    def test_update_param(self, graph):
        action = graph.add_action(Trigger.ON_START, "COLOR")
        graph.update_param(action.id, "color", "#00ff00")

        assert graph.find_action(action.id).params == {"color": "#00ff00"}

    def test_ensure_event_creates_key_trigger(self, graph):
        event = graph.ensure_event(Trigger.ON_KEY, key="space")

        assert event.type == Trigger.ON_KEY
        assert event.key == "space"
        assert graph.ensure_event(Trigger.ON_KEY) is event

    def test_each_key_gets_its_own_event(self, graph):
        space = graph.ensure_event(Trigger.ON_KEY, key="space")
        h = graph.ensure_event(Trigger.ON_KEY, key="h")

        assert space is not h
        assert (space.key, h.key) == ("space", "h")
        assert graph.ensure_event(Trigger.ON_KEY, key="SPACE") is space
        assert len(graph.key_events()) == 2
        assert len({event.id for event in graph.events}) == len(graph.events)

    def test_add_action_to_key_event(self, graph):
        graph.add_action(Trigger.ON_KEY, "VISIBLE", key="space")
        graph.add_action(Trigger.ON_KEY, "COLOR", key="h")

        assert [a.type for a in graph.event_for(Trigger.ON_KEY, "space").actions] == ["VISIBLE"]
        assert [a.type for a in graph.event_for(Trigger.ON_KEY, "h").actions] == ["COLOR"]

    def test_keyless_key_event_takes_first_key(self, graph):
        event = graph.ensure_event(Trigger.ON_KEY)

        assert graph.ensure_event(Trigger.ON_KEY, key="q") is event
        assert event.key == "q"

    def test_snapshot_is_deep(self, graph):
        action = graph.add_action(Trigger.ON_START, "MOVE")
        snap = graph.snapshot()

        graph.update_param(action.id, "amount", 99)
        graph.add_action(Trigger.ON_START, "WAIT")

        snap_actions = snap.event_for(Trigger.ON_START).actions
        assert len(snap_actions) == 1
        assert snap_actions[0].params == {"axis": "x", "amount": 1}


class TestSerialization:
    """JSON list-of-events shape."""

    def test_from_events(self):
        graph = BehaviorGraph.from_events([
            {"id": "start_event", "type": "ON_START", "actions": [
                {"id": "a1", "type": "MOVE", "params": {"axis": "y", "amount": 2}},
            ]},
            {"id": "click_event", "type": "ON_CLICK", "actions": []},
        ])

        start = graph.event_for(Trigger.ON_START)
        assert start.actions[0].id == "a1"
        assert start.actions[0].params["amount"] == 2

    def test_round_trip_shape(self):
        graph = BehaviorGraph.default()
        graph.add_action(Trigger.ON_CLICK, "SCALE")

        events = graph.to_events()

        assert events[0] == {"id": "start_event", "type": "ON_START", "actions": []}
        assert events[1]["actions"][0]["params"] == {"scale": 1.5}
        assert BehaviorGraph.from_events(events) == graph

    def test_malformed_params_are_kept_loadable(self):
        action = LogicAction.model_validate({"id": "x", "type": "MOVE", "params": None})
        assert action.params == {}

    def test_duplicate_action_ids_rejected(self):
        with pytest.raises(ValidationError):
            BehaviorGraph.from_events([
                {"id": "e", "type": "ON_START", "actions": [
                    {"id": "dup", "type": "MOVE"},
                    {"id": "dup", "type": "WAIT"},
                ]},
            ])

    def test_unknown_trigger_kept_as_string(self):
        graph = BehaviorGraph.from_events([
            {"id": "drag", "type": "ON_DRAG", "actions": [{"id": "a", "type": "MOVE"}]},
            {"id": "start", "type": "ON_START", "actions": []},
        ])

        assert graph.events[0].type == "ON_DRAG"
        assert not isinstance(graph.events[0].type, Trigger)
        assert graph.events[1].type is Trigger.ON_START
        assert graph.to_events()[0]["type"] == "ON_DRAG"


class TestSceneObjectData:
    """Scene file records."""

    def test_vectors_from_lists(self):
        obj = SceneObjectData(id="cube", position=[1, 2, 3], rotation=(0, 90, 0))

        assert obj.position == Vector3(x=1, y=2, z=3)
        assert obj.rotation.y == 90
        assert obj.scale.as_tuple() == (1.0, 1.0, 1.0)

    def test_logic_data_alias_and_list(self):
        obj = SceneObjectData.model_validate({
            "id": "cube",
            "logicData": [{"id": "s", "type": "ON_START", "actions": [{"id": "a", "type": "WAIT"}]}],
        })
        assert obj.logic.event_for(Trigger.ON_START).actions[0].type == "WAIT"

    def test_default_logic(self):
        obj = SceneObjectData(id="cube")
        assert obj.logic.is_empty()
        assert obj.logic.event_for(Trigger.ON_CLICK) is not None


def test_default_params_unknown_type():
    assert default_params("NOPE") == {}
    assert default_params("WAIT") == {"seconds": 1}
