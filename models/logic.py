"""
Behavior graph models - the declarative logic attached to scene objects.

Each scene object owns one BehaviorGraph: a list of trigger events, each
holding an ordered list of actions. The graph is edited at design time and
snapshotted when the simulation starts; the compiler turns the snapshot into
executable procedures.

JSON shape (persisted by the surrounding application):

    [
      {"id": "start_event", "type": "ON_START", "actions": [
          {"id": "a1", "type": "MOVE", "params": {"axis": "y", "amount": 2}}
      ]},
      {"id": "click_event", "type": "ON_CLICK", "actions": []}
    ]
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)

from .primitives import Vector3


class Trigger(str, Enum):
    """Event kinds that start an action sequence."""
    ON_START = "ON_START"
    ON_CLICK = "ON_CLICK"
    ON_HOVER = "ON_HOVER"  # Reserved, never compiled
    ON_KEY = "ON_KEY"


class ActionType(str, Enum):
    """Known action types. Graphs may still carry unknown type strings."""
    MOVE = "MOVE"
    ROTATE = "ROTATE"
    SCALE = "SCALE"
    COLOR = "COLOR"
    WAIT = "WAIT"
    VISIBLE = "VISIBLE"
    MOVE_TO = "MOVE_TO"
    OPACITY = "OPACITY"


# Params a freshly added action starts with in the editor
DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    ActionType.MOVE.value: {"axis": "x", "amount": 1},
    ActionType.ROTATE.value: {"axis": "y", "amount": 90},
    ActionType.SCALE.value: {"scale": 1.5},
    ActionType.COLOR.value: {"color": "#ff0000"},
    ActionType.WAIT.value: {"seconds": 1},
    ActionType.VISIBLE.value: {"visible": False},
    ActionType.MOVE_TO.value: {"x": 0, "y": 0, "z": 0, "seconds": 1},
    ActionType.OPACITY.value: {"opacity": 100},
}

# Event ids used by the default graph
DEFAULT_EVENT_IDS = {
    Trigger.ON_START: "start_event",
    Trigger.ON_CLICK: "click_event",
}


def new_action_id() -> str:
    """Short random id for a new action."""
    return uuid.uuid4().hex[:9]


def default_params(action_type: str) -> Dict[str, Any]:
    """Editor defaults for an action type (empty for unknown types)."""
    if isinstance(action_type, Enum):
        action_type = action_type.value
    return dict(DEFAULT_PARAMS.get(action_type, {}))


class LogicAction(BaseModel):
    """One declarative step: a typed operation plus free-form params.

    ``type`` is kept as a string so that unknown types load fine and compile
    to no-ops instead of failing validation.
    """
    id: str = Field(default_factory=new_action_id)
    type: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('type', mode='before')
    @classmethod
    def _type_to_str(cls, v: Any) -> str:
        if isinstance(v, Enum):
            return str(v.value)
        return str(v)

    @field_validator('params', mode='before')
    @classmethod
    def _params_default(cls, v: Any) -> Dict[str, Any]:
        # Missing or malformed params are defaulted at compile time
        return v if isinstance(v, dict) else {}


class LogicEvent(BaseModel):
    """A trigger and its ordered actions.

    ``type`` holds a Trigger for known trigger names. Unknown names from
    newer or foreign graphs are kept as plain strings so the graph still
    loads; the compiler skips them.
    """
    id: str
    type: Union[Trigger, str]
    actions: List[LogicAction] = Field(default_factory=list)
    key: Optional[str] = None  # Only used by ON_KEY

    @field_validator('type', mode='before')
    @classmethod
    def _known_trigger(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, Trigger):
            try:
                return Trigger(v)
            except ValueError:
                return v
        return v

    def matches(self, trigger: Trigger, key: Optional[str] = None) -> bool:
        """True for this trigger and, when given, this key (case-insensitive)."""
        if self.type != trigger:
            return False
        return key is None or (self.key or '').lower() == key.lower()


class BehaviorGraph(BaseModel):
    """Per-object behavior graph: one event per trigger kind.

    Edit operations mutate the graph in place; ``snapshot()`` returns the
    deep copy handed to the compiler at simulation start.
    """
    events: List[LogicEvent] = Field(default_factory=list)

    @model_validator(mode='after')
    def _unique_action_ids(self) -> "BehaviorGraph":
        seen = set()
        for event in self.events:
            for action in event.actions:
                if action.id in seen:
                    raise ValueError(f"Duplicate action id: {action.id}")
                seen.add(action.id)
        return self

    @classmethod
    def default(cls) -> "BehaviorGraph":
        """Graph for a newly created object: empty ON_START and ON_CLICK."""
        return cls(events=[
            LogicEvent(id=DEFAULT_EVENT_IDS[Trigger.ON_START], type=Trigger.ON_START),
            LogicEvent(id=DEFAULT_EVENT_IDS[Trigger.ON_CLICK], type=Trigger.ON_CLICK),
        ])

    @classmethod
    def from_events(cls, data: List[Dict[str, Any]]) -> "BehaviorGraph":
        """Load from the persisted JSON list-of-events shape."""
        return cls.model_validate({'events': data})

    def to_events(self) -> List[Dict[str, Any]]:
        """Dump to the persisted JSON list-of-events shape."""
        return [event.model_dump(mode='json', exclude_none=True) for event in self.events]

    def is_empty(self) -> bool:
        """True if no trigger has any action."""
        return all(not event.actions for event in self.events)

    def snapshot(self) -> "BehaviorGraph":
        """Deep copy taken when the simulation starts."""
        return self.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Edit operations
    # -------------------------------------------------------------------------

    def event_for(self, trigger: Trigger, key: Optional[str] = None) -> Optional[LogicEvent]:
        """Get the first event for a trigger (and key, for ON_KEY), or None."""
        for event in self.events:
            if event.matches(trigger, key):
                return event
        return None

    def key_events(self) -> List[LogicEvent]:
        """All ON_KEY events, one per bound key."""
        return [event for event in self.events if event.type == Trigger.ON_KEY]

    def _new_event_id(self, trigger: Trigger, key: Optional[str]) -> str:
        if key is not None:
            base = f"key_{key.lower()}_event"
        else:
            base = DEFAULT_EVENT_IDS.get(trigger, f"{trigger.value.lower()}_event")
        existing = {event.id for event in self.events}
        event_id, suffix = base, 2
        while event_id in existing:
            event_id = f"{base}_{suffix}"
            suffix += 1
        return event_id

    def ensure_event(self, trigger: Trigger, key: Optional[str] = None) -> LogicEvent:
        """
        Get or create the event for a trigger.

        For ON_KEY each key gets its own event. A key is first looked up
        among the existing ON_KEY events; failing that, an ON_KEY event that
        has no key yet takes it, and otherwise a new event is appended.
        """
        event = self.event_for(trigger, key)
        if event is None and key is not None and trigger == Trigger.ON_KEY:
            event = next((e for e in self.key_events() if not e.key), None)
            if event is not None:
                event.key = key
        if event is None:
            event = LogicEvent(id=self._new_event_id(trigger, key), type=trigger, key=key)
            self.events.append(event)
        return event

    def _action_ids(self) -> set:
        return {action.id for event in self.events for action in event.actions}

    def add_action(
        self,
        trigger: Trigger,
        action_type: str,
        params: Optional[Dict[str, Any]] = None,
        key: Optional[str] = None,
    ) -> LogicAction:
        """Append an action to a trigger's list.

        Args:
            trigger: Trigger to append to (event is created if missing)
            action_type: Action type (ActionType or raw string)
            params: Params; editor defaults for the type when omitted
            key: Key of the ON_KEY event to append to

        Returns:
            The new action
        """
        event = self.ensure_event(trigger, key)
        existing = self._action_ids()
        action_id = new_action_id()
        while action_id in existing:
            action_id = new_action_id()

        if params is None:
            params = default_params(action_type)
        action = LogicAction(id=action_id, type=action_type, params=dict(params))
        event.actions.append(action)
        return action

    def find_action(self, action_id: str) -> LogicAction:
        """Get an action by id.

        Raises:
            KeyError: If no action has this id
        """
        for event in self.events:
            for action in event.actions:
                if action.id == action_id:
                    return action
        raise KeyError(action_id)

    def remove_action(self, action_id: str) -> LogicAction:
        """Delete an action by id.

        Raises:
            KeyError: If no action has this id
        """
        for event in self.events:
            for index, action in enumerate(event.actions):
                if action.id == action_id:
                    return event.actions.pop(index)
        raise KeyError(action_id)

    def move_action(self, trigger: Trigger, from_index: int, to_index: int) -> None:
        """Reorder an action within one trigger's list.

        Raises:
            KeyError: If the graph has no event for the trigger
            IndexError: If either index is out of range
        """
        event = self.event_for(trigger)
        if event is None:
            raise KeyError(trigger.value)
        count = len(event.actions)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise IndexError(f"Action index out of range (0..{count - 1})")
        action = event.actions.pop(from_index)
        event.actions.insert(to_index, action)

    def update_param(self, action_id: str, name: str, value: Any) -> None:
        """Set one param on an action.

        Raises:
            KeyError: If no action has this id
        """
        action = self.find_action(action_id)
        action.params = {**action.params, name: value}


class SceneObjectData(BaseModel):
    """Application-level record of a scene object, as stored in scene files."""
    id: str
    name: str = ""
    position: Vector3 = Field(default_factory=Vector3)
    rotation: Vector3 = Field(default_factory=Vector3)
    scale: Vector3 = Field(default_factory=lambda: Vector3(x=1.0, y=1.0, z=1.0))
    color: str = "#cccccc"
    visible: bool = True
    logic: BehaviorGraph = Field(
        default_factory=BehaviorGraph.default,
        validation_alias=AliasChoices('logic', 'logicData'),
    )

    @field_validator('position', 'rotation', 'scale', mode='before')
    @classmethod
    def _vector_from_list(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return Vector3.from_sequence(v)
        return v

    @field_validator('logic', mode='before')
    @classmethod
    def _logic_from_list(cls, v: Any) -> Any:
        if isinstance(v, list):
            return {'events': v}
        return v
