"""
Consumer-facing handle for a machine engine.

Rendering code holds a MachineApi instead of the engine itself: it can read
the current state and payload, list states and triggers, subscribe to
events, and invoke triggers for the state it last observed.
"""

from typing import Any, Awaitable, Callable, List

from fsmachine.state_machines.events import Subscription, TransitionEvent, TriggerInvokedEvent
from fsmachine.state_machines.machine import FSMachine


class StateInvoker:
    """Invokes triggers on behalf of a consumer that observed ``state``."""

    def __init__(self, machine: FSMachine, state: str):
        self._machine = machine
        self.state = state

    async def __call__(self, trigger: str, *args: Any) -> bool:
        return await self._machine.invoke_trigger(self.state, trigger, *args)

    def __repr__(self) -> str:
        return f"<StateInvoker state={self.state!r}>"


class MachineApi:
    """Read/command surface of a machine, passed explicitly to consumers."""

    def __init__(self, machine: FSMachine):
        self._machine = machine

    @property
    def machine(self) -> FSMachine:
        return self._machine

    @property
    def state(self) -> str:
        return self._machine.current_state

    @property
    def is_blocked(self) -> bool:
        return self._machine.is_blocked

    def get_payload(self) -> Any:
        return self._machine.current_payload

    def get_all_states(self) -> List[str]:
        return self._machine.get_all_states()

    def get_all_triggers(self) -> List[str]:
        return self._machine.get_all_triggers()

    def get_state_triggers(self, state: str) -> List[str]:
        return self._machine.get_state_triggers(state)

    def invoke_state_trigger(self, state: str, trigger: str, *args: Any) -> Awaitable[bool]:
        """
        Invoke ``trigger`` only if the machine is still in ``state``.

        Pass the state this consumer last rendered; the machine drops the call
        if it has moved on in the meantime.
        """
        return self._machine.invoke_trigger(state, trigger, *args)

    def bind(self, state: str) -> StateInvoker:
        """Return an invoker fixed to ``state`` as observed right now."""
        return StateInvoker(self._machine, state)

    def add_transition_done_listener(self, callback: Callable[[TransitionEvent], None]) -> Subscription:
        return self._machine.add_transition_done_listener(callback)

    def add_trigger_invoke_listener(self, callback: Callable[[TriggerInvokedEvent], None]) -> Subscription:
        return self._machine.add_trigger_invoke_listener(callback)
