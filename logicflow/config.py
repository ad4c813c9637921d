"""Runtime configuration and scene file loading."""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from models import SceneObjectData

from logicflow.errors import SceneFileError
from logicflow.logging import get_logger

log = get_logger('config')

_ENV_PREFIX = 'LOGICFLOW_'


@dataclass
class RuntimeConfig:
    """Timing and viewport settings for a simulation session."""

    interpolation_steps: int = 30  # Steps per move_by/rotate_by
    move_to_rate: int = 60  # Steps per second for move_to
    tick_rate: int = 60  # Loop ticks per second

    # Viewport used by the reference scene graph for picking
    viewport: Tuple[int, int] = (800, 600)
    pixels_per_unit: float = 50.0

    def __post_init__(self):
        if self.interpolation_steps < 1:
            raise ValueError(f"interpolation_steps must be >= 1, got {self.interpolation_steps}")
        if self.move_to_rate < 1:
            raise ValueError(f"move_to_rate must be >= 1, got {self.move_to_rate}")
        if self.tick_rate < 1:
            raise ValueError(f"tick_rate must be >= 1, got {self.tick_rate}")
        if self.pixels_per_unit <= 0:
            raise ValueError(f"pixels_per_unit must be positive, got {self.pixels_per_unit}")

    @property
    def tick_interval(self) -> float:
        """Seconds per loop tick."""
        return 1.0 / self.tick_rate

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeConfig":
        """Build from LOGICFLOW_* environment variables.

        Recognized: LOGICFLOW_INTERPOLATION_STEPS, LOGICFLOW_MOVE_TO_RATE,
        LOGICFLOW_TICK_RATE, LOGICFLOW_PIXELS_PER_UNIT.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == 'viewport':
                continue
            key = _ENV_PREFIX + f.name.upper()
            if key not in environ:
                continue
            caster = float if f.name == 'pixels_per_unit' else int
            try:
                overrides[f.name] = caster(environ[key])
            except ValueError:
                log.warning("Ignoring %s=%r (not a number)", key, environ[key])
        return cls(**overrides)


def _read_scene_data(path: Path) -> Any:
    """Parse a YAML or JSON scene file."""
    try:
        with open(path) as f:
            if path.suffix.lower() == '.json':
                return json.load(f)
            return yaml.safe_load(f)
    except OSError as e:
        raise SceneFileError(f"cannot read scene file ({e})", path) from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SceneFileError(f"cannot parse scene file ({e})", path) from e


def parse_scene(data: Any, path: Optional[Path] = None) -> List[SceneObjectData]:
    """Validate scene data: ``{objects: [...]}`` or a bare list of objects.

    Raises:
        SceneFileError: If the data has the wrong shape or fails validation
    """
    if isinstance(data, dict):
        data = data.get('objects', [])
    if data is None:
        data = []
    if not isinstance(data, list):
        raise SceneFileError("expected a list of objects", path)

    objects = []
    for index, item in enumerate(data):
        try:
            objects.append(SceneObjectData.model_validate(item))
        except ValidationError as e:
            raise SceneFileError(f"object {index}: {e}", path) from e

    ids = [obj.id for obj in objects]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise SceneFileError(f"duplicate object ids: {', '.join(duplicates)}", path)
    return objects


def load_scene(path: Union[str, Path]) -> List[SceneObjectData]:
    """
    Load scene objects from a YAML or JSON file.

    Args:
        path: Scene file (.yaml/.yml/.json)

    Returns:
        Validated scene objects

    Raises:
        SceneFileError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    objects = parse_scene(_read_scene_data(path), path)
    log.info("Loaded %d objects from %s", len(objects), path)
    return objects
