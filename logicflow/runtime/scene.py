"""
Scene access for the runtime.

The runtime never owns the scene graph. It resolves nodes and pick results
through an ObjectAccessor and mutates node fields directly.

SceneGraph is a small in-memory accessor used by the CLI and tests: nodes
built from SceneObjectData, picked with an orthographic camera looking down
the -z axis.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from models import SceneObjectData

from logicflow.config import RuntimeConfig
from logicflow.input.events import PointerEvent
from logicflow.logging import get_logger

log = get_logger('scene')


@dataclass
class Vec3:
    """Mutable vector field on a scene node."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def get(self, axis: str) -> float:
        return getattr(self, axis)

    def set_axis(self, axis: str, value: float) -> None:
        setattr(self, axis, value)

    def set(self, x: float, y: float, z: float) -> None:
        self.x, self.y, self.z = x, y, z

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass
class Material:
    """Surface appearance of a node."""
    color: str = "#cccccc"
    opacity: float = 1.0
    transparent: bool = False


@dataclass
class SceneNode:
    """A renderable node. Child positions are offsets from the parent."""
    name: str
    object_id: Optional[str] = None  # Set on the root node of a scene object
    position: Vec3 = field(default_factory=Vec3)
    rotation: Vec3 = field(default_factory=Vec3)  # Radians
    scale: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 1.0))
    material: Optional[Material] = field(default_factory=Material)
    visible: bool = True
    size: float = 1.0  # Edge length at scale 1
    parent: Optional["SceneNode"] = field(default=None, repr=False)
    children: List["SceneNode"] = field(default_factory=list, repr=False)

    def add(self, child: "SceneNode") -> "SceneNode":
        child.parent = self
        self.children.append(child)
        return child

    def traverse(self) -> Iterator["SceneNode"]:
        yield self
        for child in self.children:
            yield from child.traverse()

    def world_position(self) -> Tuple[float, float, float]:
        x, y, z = self.position.as_tuple()
        node = self.parent
        while node is not None:
            x += node.position.x
            y += node.position.y
            z += node.position.z
            node = node.parent
        return (x, y, z)

    def is_shown(self) -> bool:
        """Visible and every ancestor visible."""
        node: Optional[SceneNode] = self
        while node is not None:
            if not node.visible:
                return False
            node = node.parent
        return True

    def owner_id(self) -> Optional[str]:
        """Id of the scene object this node belongs to."""
        node: Optional[SceneNode] = self
        while node is not None and node.object_id is None:
            node = node.parent
        return node.object_id if node is not None else None


@runtime_checkable
class ObjectAccessor(Protocol):
    """Scene collaborator consumed by the runtime."""

    def get_object_mesh(self, object_id: str) -> Optional[SceneNode]:
        """Resolve the node to mutate for an object, or None."""
        ...

    def ray_intersect(self, event: PointerEvent) -> Optional[str]:
        """Resolve the object id under a pointer event, or None."""
        ...


class SceneGraph:
    """
    In-memory scene graph implementing ObjectAccessor.

    Picking uses an orthographic camera centred on the world origin and
    looking down -z: the screen centre maps to (0, 0), +y is up, and
    ``pixels_per_unit`` screen pixels span one world unit. Only shown nodes
    are hit; the node nearest the camera (largest z) wins.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        self.config = config or RuntimeConfig()
        self._objects: Dict[str, SceneNode] = {}

    @classmethod
    def from_objects(
        cls,
        objects: List[SceneObjectData],
        config: Optional[RuntimeConfig] = None,
    ) -> "SceneGraph":
        scene = cls(config)
        for obj in objects:
            scene.add_object(obj)
        return scene

    def add_object(self, obj: SceneObjectData) -> SceneNode:
        """Create the root node for a scene object."""
        node = SceneNode(
            name=obj.name or obj.id,
            object_id=obj.id,
            position=Vec3(*obj.position.as_tuple()),
            rotation=Vec3(*obj.rotation.as_tuple()),
            scale=Vec3(*obj.scale.as_tuple()),
            material=Material(color=obj.color),
            visible=obj.visible,
        )
        self._objects[obj.id] = node
        return node

    def add_node(self, object_id: str, node: SceneNode) -> None:
        """Register a prebuilt node tree as a scene object."""
        node.object_id = object_id
        self._objects[object_id] = node

    def remove_object(self, object_id: str) -> None:
        self._objects.pop(object_id, None)

    def object_ids(self) -> List[str]:
        return list(self._objects)

    def get_object_mesh(self, object_id: str) -> Optional[SceneNode]:
        return self._objects.get(object_id)

    def screen_to_world(self, x: float, y: float) -> Tuple[float, float]:
        width, height = self.config.viewport
        ppu = self.config.pixels_per_unit
        return ((x - width / 2) / ppu, (height / 2 - y) / ppu)

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        width, height = self.config.viewport
        ppu = self.config.pixels_per_unit
        return (width / 2 + x * ppu, height / 2 - y * ppu)

    def ray_intersect(self, event: PointerEvent) -> Optional[str]:
        wx, wy = self.screen_to_world(event.x, event.y)

        best: Optional[SceneNode] = None
        best_z = float('-inf')
        for root in self._objects.values():
            for node in root.traverse():
                if not node.is_shown():
                    continue
                nx, ny, nz = node.world_position()
                half_w = abs(node.scale.x) * node.size / 2
                half_h = abs(node.scale.y) * node.size / 2
                if abs(wx - nx) <= half_w and abs(wy - ny) <= half_h and nz > best_z:
                    best, best_z = node, nz

        if best is None:
            return None
        hit = best.owner_id()
        log.debug("Pointer (%.0f, %.0f) -> world (%.2f, %.2f) hit %s",
                  event.x, event.y, wx, wy, hit)
        return hit

    def describe_state(self) -> Dict[str, Dict[str, object]]:
        """Current object properties, for printing and debugging."""
        state = {}
        for object_id, node in self._objects.items():
            state[object_id] = {
                'position': [round(v, 4) for v in node.position.as_tuple()],
                'rotation': [round(v, 4) for v in node.rotation.as_tuple()],
                'scale': [round(v, 4) for v in node.scale.as_tuple()],
                'color': node.material.color if node.material else None,
                'opacity': node.material.opacity if node.material else None,
                'visible': node.visible,
            }
        return state
