from fsmachine.services.binding import MachineApi, StateInvoker
from fsmachine.services.step_wizard import StepWizard

__all__ = [
    "MachineApi",
    "StateInvoker",
    "StepWizard",
]
