"""
Step wizard: one renderer per state.

Only the renderer registered for the current state runs. It receives the
state, its payload, and an invoker bound to the state it was rendered for,
so input arriving after the machine has moved on is dropped by the guard.
"""

from typing import Any, Callable, Dict, List, Optional

import structlog

from fsmachine.core.exceptions import InvalidStateError
from fsmachine.state_machines.declaration import StatesTriggers
from fsmachine.state_machines.machine import FSMachine

from .binding import MachineApi, StateInvoker

logger = structlog.get_logger(__name__)

StepRenderFn = Callable[[str, Any, StateInvoker], Any]


class StepWizard:
    """Dispatches rendering to the step matching the machine's current state."""

    def __init__(self, api: MachineApi):
        self.api = api
        self._steps: Dict[str, StepRenderFn] = {}

    @classmethod
    def build(
        cls,
        steps_triggers: StatesTriggers,
        initial_step: str,
        initial_step_payload: Any = None,
        **machine_kwargs: Any,
    ) -> "StepWizard":
        """Create the machine for a set of steps and wrap it in a wizard."""
        machine = FSMachine(
            initial_state=initial_step,
            initial_payload=initial_step_payload,
            states_triggers=steps_triggers,
            **machine_kwargs,
        )
        return cls(machine.api())

    @property
    def steps(self) -> List[str]:
        return list(self._steps)

    def add_step(self, name: str, render: StepRenderFn) -> None:
        if name not in self.api.machine.declaration:
            raise InvalidStateError(name)
        if name in self._steps:
            logger.warning("step_renderer_replaced", step=name)
        self._steps[name] = render

    def step(self, name: str) -> Callable[[StepRenderFn], StepRenderFn]:
        """
        Register the decorated function as the renderer of step ``name``.

        Usage:
            @wizard.step("user_credentials")
            def credentials_form(state, payload, invoke):
                ...
        """
        def decorator(render: StepRenderFn) -> StepRenderFn:
            self.add_step(name, render)
            return render

        return decorator

    def render(self) -> Optional[Any]:
        """Run the renderer of the current step; None if the step has none."""
        state = self.api.state
        render = self._steps.get(state)
        if render is None:
            return None
        return render(state, self.api.get_payload(), self.api.bind(state))
