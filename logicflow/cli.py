"""
LogicFlow Player - run a scene file's behaviors.

Usage:
    # Run ON_START behaviors for 3 seconds, headless
    python -m logicflow scene.yaml --duration 3

    # Script clicks and key presses (object id or key @ seconds)
    python -m logicflow scene.yaml --click cube@0.5 --click cube@0.6 --key space@1

    # Open a preview window and play with the mouse
    python -m logicflow scene.yaml --window
"""

import argparse
import json
import sys
from typing import List, Optional, Tuple

import pygame

from logicflow.compiler import compile_scene
from logicflow.config import RuntimeConfig, load_scene
from logicflow.errors import LogicFlowError
from logicflow.input.surface import HeadlessSurface, PygameSurface
from logicflow.logging import (
    close_record_sink,
    configure_logging,
    get_logger,
    install_record_sink,
    open_record_sink,
)
from logicflow.loop import ScriptedInput, SimulationLoop
from logicflow.preview import ScenePreview
from logicflow.runtime import InteractionRuntime, SceneGraph

log = get_logger('cli')


def _split_timed(value: str) -> Tuple[str, float]:
    """Parse 'NAME@SECONDS'."""
    name, sep, when = value.rpartition('@')
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME@SECONDS, got {value!r}")
    try:
        return name, float(when)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad time in {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='logicflow',
        description='LogicFlow Player - run behavior graphs of a scene file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m logicflow scene.yaml --duration 3
  python -m logicflow scene.yaml --click cube@0.5 --key space@1
  python -m logicflow scene.yaml --window
        """
    )
    parser.add_argument('scene', help='Scene file (.yaml/.yml/.json)')
    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help='Seconds of simulation to run (default: 5; window: until closed)'
    )
    parser.add_argument(
        '--click',
        type=_split_timed,
        action='append',
        default=[],
        metavar='OBJECT@T',
        help='Click the centre of OBJECT at T seconds (headless only, repeatable)'
    )
    parser.add_argument(
        '--key',
        type=_split_timed,
        action='append',
        default=[],
        metavar='KEY@T',
        help='Press KEY at T seconds (headless only, repeatable)'
    )
    parser.add_argument(
        '--window',
        action='store_true',
        help='Open a pygame preview window and take real mouse/keyboard input'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Log level (DEBUG, INFO, WARNING, ERROR, OFF; default: WARNING)'
    )
    parser.add_argument(
        '--trace-steps',
        action='store_true',
        help='Log every executed operation'
    )
    parser.add_argument(
        '--records',
        default=None,
        metavar='PATH',
        help='Write instance lifecycle records to PATH as JSON Lines'
    )
    return parser


def build_script(scene: SceneGraph, clicks, keys) -> List[ScriptedInput]:
    """Turn --click/--key arguments into scripted inputs."""
    script = []
    for object_id, when in clicks:
        node = scene.get_object_mesh(object_id)
        if node is None:
            raise LogicFlowError(f"--click: unknown object {object_id!r}")
        wx, wy, _ = node.world_position()
        x, y = scene.world_to_screen(wx, wy)
        script.append(ScriptedInput(time=when, kind='click', x=x, y=y))
    for key, when in keys:
        script.append(ScriptedInput(time=when, kind='key', key=key))
    return script


def run(args: argparse.Namespace) -> int:
    # Step records are logged at DEBUG by the runtime module
    configure_logging(
        level=args.log_level,
        modules={'runtime': 'DEBUG'} if args.trace_steps else None,
        steps=args.trace_steps,
    )
    install_record_sink(open_record_sink(args.records))
    config = RuntimeConfig.from_env()

    objects = load_scene(args.scene)
    scene = SceneGraph.from_objects(objects, config)
    compiled = compile_scene(objects)
    log.info("Compiled %d objects from %s", len(compiled), args.scene)

    if args.window:
        pygame.init()
        screen = pygame.display.set_mode(config.viewport)
        pygame.display.set_caption(f"LogicFlow - {args.scene}")
        surface = PygameSurface()
        preview = ScenePreview(scene)

        def render() -> None:
            preview.render(screen)
            pygame.display.flip()

        runtime = InteractionRuntime(scene, surface, config)
        loop = SimulationLoop(runtime, surface, config, render=render)
        try:
            runtime.start(objects, compiled)
            loop.run_realtime(args.duration)
        finally:
            runtime.stop()
            pygame.quit()
    else:
        surface = HeadlessSurface()
        script = build_script(scene, args.click, args.key)
        runtime = InteractionRuntime(scene, surface, config)
        loop = SimulationLoop(runtime, surface, config)
        runtime.start(objects, compiled)
        try:
            loop.run_fixed(args.duration if args.duration is not None else 5.0, script)
        finally:
            live = len(runtime.instances)
            runtime.stop()
        print(f"Ran {loop.elapsed:.2f}s ({loop.ticks} ticks), "
              f"{runtime.stats['launched']} instances launched, "
              f"{runtime.stats['completed']} completed, {live} still running at stop")

    print(json.dumps(scene.describe_state(), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the LogicFlow player."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except LogicFlowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        close_record_sink()


if __name__ == '__main__':
    sys.exit(main())
