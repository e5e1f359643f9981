"""Custom exceptions for state machine errors"""

from typing import Any, Dict, Optional


class FSMachineError(Exception):
    """Base exception for all state machine errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Declaration Errors
class MachineConfigurationError(FSMachineError):
    """Raised when the states declaration or initial state is unusable"""

    pass


class InvalidStateError(FSMachineError):
    """Raised when a state name is not part of the declaration"""

    def __init__(self, state: Any, details: Optional[Dict[str, Any]] = None):
        self.state = state
        super().__init__(
            message=f"Unknown state: {state!r}",
            details=details or {"state": state},
        )


class InvalidTriggerError(FSMachineError):
    """Raised when a trigger is not declared for the given state"""

    def __init__(
        self,
        state: Any,
        trigger: Any,
        available: Optional[list] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.state = state
        self.trigger = trigger
        available = available or []
        super().__init__(
            message=(
                f"Invalid trigger {trigger!r} for state {state!r}. "
                f"Available: {available}"
            ),
            details=details or {"state": state, "trigger": trigger, "available": available},
        )


class PayloadValidationError(FSMachineError):
    """Raised when a payload does not match the type declared for its state"""

    pass


# Execution Errors
class TriggerExecutionError(FSMachineError):
    """Raised when a transition function fails instead of settling normally"""

    def __init__(
        self, message: str, state: Any, trigger: str, details: Optional[Dict[str, Any]] = None
    ):
        self.state = state
        self.trigger = trigger
        super().__init__(message, details or {"state": state, "trigger": trigger})


class TriggerTimeoutError(TriggerExecutionError):
    """Raised when a transition function does not settle before its deadline"""

    def __init__(self, state: Any, trigger: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            message=f"Trigger {trigger!r} in state {state!r} did not settle within {timeout}s",
            state=state,
            trigger=trigger,
            details={"state": state, "trigger": trigger, "timeout_seconds": timeout},
        )
