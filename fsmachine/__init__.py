"""
fsmachine - a typed finite state machine runtime for multi-step flows.

The states declaration says which triggers are legal in which state and
what they do; consumers render the current state and invoke triggers for
the state they observed.
"""

from fsmachine.core.decorators import trigger_handler
from fsmachine.core.exceptions import (
    FSMachineError,
    InvalidStateError,
    InvalidTriggerError,
    MachineConfigurationError,
    PayloadValidationError,
    TriggerExecutionError,
    TriggerTimeoutError,
)
from fsmachine.services import MachineApi, StateInvoker, StepWizard
from fsmachine.state_machines import (
    FSMachine,
    StateDeclaration,
    StatesDeclaration,
    Subscription,
    TransitionContext,
    TransitionEvent,
    TriggerInvokedEvent,
    get_flow_machine,
)

__version__ = "1.0.0"

__all__ = [
    "FSMachine",
    "FSMachineError",
    "InvalidStateError",
    "InvalidTriggerError",
    "MachineApi",
    "MachineConfigurationError",
    "PayloadValidationError",
    "StateDeclaration",
    "StateInvoker",
    "StatesDeclaration",
    "StepWizard",
    "Subscription",
    "TransitionContext",
    "TransitionEvent",
    "TriggerExecutionError",
    "TriggerInvokedEvent",
    "TriggerTimeoutError",
    "get_flow_machine",
    "trigger_handler",
]
