"""
Operating status of a machine engine.

An engine is either idle (accepting trigger invocations for its current
state) or executing (a trigger is in flight and every invocation is dropped).
"""

from typing import Any, Dict, Optional

import structlog
from statemachine import State, StateMachine


class EngineStatusMachine(StateMachine):
    """
    Idle/executing status machine backing the engine's blocked flag.

    Features:
    - ``begin`` / ``settle`` are the only ways in and out of executing
    - Structured logging on every status change
    - get_status_info() for diagnostics
    """

    idle = State(initial=True, value="idle")
    executing = State(value="executing")

    begin = idle.to(executing)
    settle = executing.to(idle)

    def __init__(self, machine_name: Optional[str] = None, **kwargs):
        """
        Initialize status machine.

        Args:
            machine_name: Name of the owning engine, for logging
            **kwargs: Additional context passed to StateMachine
        """
        self.machine_name = machine_name
        self.active_trigger: Optional[str] = None
        self.logger = structlog.get_logger(__name__)
        super().__init__(**kwargs)

    @property
    def is_blocked(self) -> bool:
        return self.executing.is_active

    def get_status_info(self) -> Dict[str, Any]:
        return {
            "status": self.executing.id if self.is_blocked else self.idle.id,
            "blocked": self.is_blocked,
            "active_trigger": self.active_trigger,
        }

    def before_begin(self, trigger: Optional[str] = None):
        """Action: Remember which trigger holds the machine."""
        self.active_trigger = trigger

    def after_settle(self):
        """Action: Release the machine for new triggers."""
        self.active_trigger = None

    def on_transition(self, event: str, source: State, target: State):
        """Hook called after every status change."""
        self.logger.debug(
            "engine_status_changed",
            machine=self.machine_name,
            status_event=str(event),
            from_status=source.id,
            to_status=target.id,
            trigger=self.active_trigger,
        )
