"""
State machine infrastructure for multi-step flows.

This package provides the machine engine, its states declaration, event
channels, and ready-made flows such as the multi-factor login wizard.
"""

from .base import EngineStatusMachine
from .context import TransitionContext
from .declaration import StateDeclaration, StatesDeclaration
from .events import EventChannel, Subscription, TransitionEvent, TriggerInvokedEvent
from .machine import FSMachine
from .registry import FLOW_REGISTRY, get_flow_machine

__all__ = [
    "EngineStatusMachine",
    "EventChannel",
    "FLOW_REGISTRY",
    "FSMachine",
    "StateDeclaration",
    "StatesDeclaration",
    "Subscription",
    "TransitionContext",
    "TransitionEvent",
    "TriggerInvokedEvent",
    "get_flow_machine",
]
