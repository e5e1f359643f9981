"""
Machine engine.

Owns the current (state, payload, blocked) tuple, guards trigger
invocations against stale callers, runs transition functions one at a time
and commits the transitions they request.
"""

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from fsmachine.core.config import settings
from fsmachine.core.exceptions import (
    FSMachineError,
    MachineConfigurationError,
    TriggerExecutionError,
    TriggerTimeoutError,
)

from .base import EngineStatusMachine
from .context import TransitionContext
from .declaration import StatesDeclaration, StatesTriggers, TransitionFn
from .events import EventChannel, Subscription, TransitionEvent, TriggerInvokedEvent

if TYPE_CHECKING:
    from fsmachine.services.binding import MachineApi

logger = structlog.get_logger(__name__)

_UNSET: Any = object()


class FSMachine:
    """
    Finite state machine engine for multi-step flows.

    Usage:
        machine = FSMachine(
            initial_state="credentials",
            initial_payload=None,
            states_triggers={
                "credentials": {"verify": verify},
                "verify_success": {},
            },
        )
        accepted = await machine.invoke_trigger("credentials", "verify", email, password)
    """

    def __init__(
        self,
        initial_state: str,
        initial_payload: Any,
        states_triggers: StatesTriggers,
        on_transition_done: Optional[Callable[[TransitionEvent], None]] = None,
        on_trigger_invoke: Optional[Callable[[TriggerInvokedEvent], None]] = None,
        trigger_timeout: Optional[float] = _UNSET,
        validate_payloads: Optional[bool] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize machine engine.

        Args:
            initial_state: State the machine starts in
            initial_payload: Payload of the initial state
            states_triggers: States declaration, captured once
            on_transition_done: Hook fired before transition_done subscribers
            on_trigger_invoke: Hook fired before trigger_invoked subscribers
            trigger_timeout: Seconds a transition function may take to settle.
                None waits forever; defaults to settings.trigger_timeout_seconds
            validate_payloads: Check payloads against declared payload types.
                Defaults to settings.validate_payloads
            name: Machine name used in logs

        Raises:
            MachineConfigurationError: If the initial state is not declared
            PayloadValidationError: If the initial payload has the wrong type
        """
        self.name = name or "fsmachine"
        self.logger = logger.bind(machine=self.name)

        if isinstance(states_triggers, StatesDeclaration):
            self._declaration = states_triggers
        else:
            if validate_payloads is None:
                validate_payloads = settings.validate_payloads
            self._declaration = StatesDeclaration(states_triggers, validate_payloads=validate_payloads)

        if initial_state not in self._declaration:
            raise MachineConfigurationError(
                f"Initial state {initial_state!r} is not declared",
                details={"initial_state": initial_state, "declared": self._declaration.get_all_states()},
            )
        self._declaration.validate_payload(initial_state, initial_payload)

        if trigger_timeout is _UNSET:
            trigger_timeout = settings.trigger_timeout_seconds
        if trigger_timeout is not None and trigger_timeout <= 0:
            raise MachineConfigurationError(
                "trigger_timeout must be positive", details={"trigger_timeout": trigger_timeout}
            )
        self.trigger_timeout = trigger_timeout

        self._state = initial_state
        self._payload = initial_payload
        self._status = EngineStatusMachine(machine_name=self.name)

        self.transition_done: EventChannel[TransitionEvent] = EventChannel("transition_done")
        self.trigger_invoked: EventChannel[TriggerInvokedEvent] = EventChannel("trigger_invoked")

        # called directly, ahead of the channels; a raising hook fails the invocation
        self._on_transition_done = on_transition_done
        self._on_trigger_invoke = on_trigger_invoke

        self.logger.debug("machine_created", initial_state=initial_state, states=len(self._declaration))

    def __repr__(self) -> str:
        return f"<FSMachine {self.name} state={self._state!r} blocked={self.is_blocked}>"

    @property
    def current_state(self) -> str:
        return self._state

    @property
    def current_payload(self) -> Any:
        return self._payload

    @property
    def is_blocked(self) -> bool:
        return self._status.is_blocked

    @property
    def declaration(self) -> StatesDeclaration:
        return self._declaration

    def get_all_states(self) -> List[str]:
        return self._declaration.get_all_states()

    def get_all_triggers(self) -> List[str]:
        return self._declaration.get_all_triggers()

    def get_state_triggers(self, state: str) -> List[str]:
        return self._declaration.get_state_triggers(state)

    def get_machine_info(self) -> Dict[str, Any]:
        """
        Returns current state and allowed triggers for diagnostics.

        Returns:
            Dict with state, allowed_triggers and engine status info
        """
        return {
            "machine": self.name,
            "state": self._state,
            "allowed_triggers": [] if self.is_blocked else self.get_state_triggers(self._state),
            **self._status.get_status_info(),
        }

    def add_transition_done_listener(self, callback: Callable[[TransitionEvent], None]) -> Subscription:
        return self.transition_done.subscribe(callback)

    def add_trigger_invoke_listener(self, callback: Callable[[TriggerInvokedEvent], None]) -> Subscription:
        return self.trigger_invoked.subscribe(callback)

    def api(self) -> "MachineApi":
        """Consumer handle exposing the read/command surface of this machine."""
        from fsmachine.services.binding import MachineApi

        return MachineApi(self)

    async def invoke_trigger(self, claimed_state: str, trigger: str, *args: Any) -> bool:
        """
        Invoke a trigger only if the machine is still in ``claimed_state``.

        Invocations naming a state the machine has already left, or arriving
        while another trigger is in flight, are dropped without an event.

        Args:
            claimed_state: State the caller last observed
            trigger: Trigger name declared for that state
            *args: Arguments for the transition function

        Returns:
            True if the invocation was accepted and ran, False if it was dropped

        Raises:
            InvalidTriggerError: If the trigger is not declared for the state
            TriggerExecutionError: If the transition function or a constructor hook raised
            TriggerTimeoutError: If the transition function did not settle in time
        """
        if claimed_state != self._state or self.is_blocked:
            self.logger.debug(
                "trigger_rejected",
                claimed_state=claimed_state,
                current_state=self._state,
                trigger=trigger,
                blocked=self.is_blocked,
            )
            return False

        transition_fn = self._declaration.resolve(self._state, trigger)

        state, payload = self._state, self._payload
        context = TransitionContext(
            state=state,
            payload=payload,
            is_blocked=self.is_blocked,
            transition=self._commit_transition,
            get_all_states=self.get_all_states,
        )

        self._status.begin(trigger=trigger)
        try:
            self.logger.info("trigger_invoked", state=state, trigger=trigger)
            await self._execute(transition_fn, context, args)
        finally:
            self._status.settle()

        return True

    async def _execute(self, transition_fn: TransitionFn, context: TransitionContext, args: Sequence[Any]) -> None:
        state = context.state
        trigger = self._status.active_trigger
        try:
            self._emit(
                self._on_trigger_invoke,
                self.trigger_invoked,
                TriggerInvokedEvent(state, context.payload, trigger, tuple(args)),
            )
            result = transition_fn(context)(*args)
            if inspect.isawaitable(result):
                await self._settle(result, state, trigger)
        except FSMachineError:
            raise
        except Exception as e:
            self.logger.error(
                "trigger_failed",
                state=state,
                trigger=trigger,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TriggerExecutionError(
                f"Trigger {trigger!r} in state {state!r} failed: {e}",
                state=state,
                trigger=trigger,
                details={"state": state, "trigger": trigger, "error_type": type(e).__name__},
            ) from e

    async def _settle(self, result: Awaitable[Any], state: str, trigger: str) -> None:
        # asyncio.timeout(None) never expires; only the engine's own deadline maps to TriggerTimeoutError
        try:
            async with asyncio.timeout(self.trigger_timeout) as deadline:
                await result
        except TimeoutError:
            if not deadline.expired():
                raise
            self.logger.error("trigger_timed_out", state=state, trigger=trigger, timeout=self.trigger_timeout)
            raise TriggerTimeoutError(state, trigger, self.trigger_timeout) from None

    @staticmethod
    def _emit(hook: Optional[Callable[[Any], None]], channel: EventChannel, event: Any) -> None:
        if hook is not None:
            hook(event)
        channel.publish(event)

    def _commit_transition(self, next_state: str, next_payload: Any = None) -> None:
        self._declaration.require_state(next_state)
        self._declaration.validate_payload(next_state, next_payload)

        if not self.is_blocked:
            self.logger.warning("transition_outside_trigger", current_state=self._state, to_state=next_state)

        from_state, from_payload = self._state, self._payload
        self._state, self._payload = next_state, next_payload

        self.logger.info("state_transition", from_state=from_state, to_state=next_state)
        self._emit(
            self._on_transition_done,
            self.transition_done,
            TransitionEvent(from_state, next_state, from_payload, next_payload),
        )
