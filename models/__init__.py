"""
Unified models library for LogicFlow.

This package provides the Pydantic data models shared by the engine,
scene files and the surrounding application:
- Primitives: Basic geometric types (Vector3)
- Logic: Behavior graphs attached to scene objects (Trigger, LogicAction,
  LogicEvent, BehaviorGraph, SceneObjectData)

Usage:
    >>> from models import BehaviorGraph, Trigger, ActionType
    >>> graph = BehaviorGraph.default()
    >>> graph.add_action(Trigger.ON_CLICK, ActionType.MOVE)
"""

# ============================================================================
# Primitives (basic types used everywhere)
# ============================================================================
from .primitives import Vector3

# ============================================================================
# Behavior graph models
# ============================================================================
from .logic import (
    Trigger,
    ActionType,
    LogicAction,
    LogicEvent,
    BehaviorGraph,
    SceneObjectData,
    DEFAULT_PARAMS,
    default_params,
)

# Top-level exports - most commonly used models
__all__ = [
    # Primitives
    "Vector3",
    # Logic
    "Trigger",
    "ActionType",
    "LogicAction",
    "LogicEvent",
    "BehaviorGraph",
    "SceneObjectData",
    "DEFAULT_PARAMS",
    "default_params",
]
