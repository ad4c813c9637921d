"""
Operation variants - the closed set of steps a compiled procedure can hold.

A procedure is an ordered tuple of these frozen dataclasses. The runtime
interpreter dispatches on the variant type; nothing is generated or
evaluated as source.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from models import Trigger


@dataclass(frozen=True)
class Move:
    """Eased relative move along one axis."""
    axis: str
    amount: float


@dataclass(frozen=True)
class Rotate:
    """Eased relative rotation around one axis, in degrees."""
    axis: str
    amount: float


@dataclass(frozen=True)
class Scale:
    """Uniform scale, applied instantly."""
    factor: float


@dataclass(frozen=True)
class Color:
    """Material color, applied instantly."""
    color: str


@dataclass(frozen=True)
class Wait:
    """Suspend the procedure for a duration in seconds."""
    seconds: float


@dataclass(frozen=True)
class Visible:
    """Show or hide the object."""
    visible: bool


@dataclass(frozen=True)
class MoveTo:
    """Linear move to an absolute position over a duration."""
    x: float
    y: float
    z: float
    seconds: float


@dataclass(frozen=True)
class Opacity:
    """Material opacity in percent (0-100), applied instantly."""
    percent: float


@dataclass(frozen=True)
class Noop:
    """Placeholder for an action type the compiler does not know."""
    source_type: str


Operation = Union[Move, Rotate, Scale, Color, Wait, Visible, MoveTo, Opacity, Noop]


@dataclass(frozen=True)
class Procedure:
    """The compiled form of one trigger's action list for one object.

    Attributes:
        object_id: Object the procedure drives
        trigger: Trigger that launches it
        operations: Ordered steps, executed strictly in sequence
        key: Key name for ON_KEY procedures
    """
    object_id: str
    trigger: Trigger
    operations: Tuple[Operation, ...]
    key: Optional[str] = None

    def __len__(self) -> int:
        return len(self.operations)

    def __str__(self) -> str:
        return f"Procedure({self.object_id}/{self.trigger.value}, {len(self.operations)} ops)"
