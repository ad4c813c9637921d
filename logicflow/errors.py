"""Exception types raised by LogicFlow."""

from pathlib import Path
from typing import Optional


class LogicFlowError(Exception):
    """Base class for LogicFlow errors."""


class RuntimeInitError(LogicFlowError):
    """The runtime could not start a simulation session."""


class SurfaceUnavailableError(RuntimeInitError):
    """No input surface to bind click/key listeners to."""


class SceneFileError(LogicFlowError):
    """A scene file could not be read or failed validation."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
