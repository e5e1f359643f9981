"""
States declaration for the machine engine.

Maps every state to the triggers valid in it, each trigger bound to a
transition function. Captured once when the engine is built and read-only
from then on.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Mapping, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from fsmachine.core.exceptions import (
    InvalidStateError,
    InvalidTriggerError,
    MachineConfigurationError,
    PayloadValidationError,
)

if TYPE_CHECKING:
    from .context import TransitionContext

logger = structlog.get_logger(__name__)

TransitionFn = Callable[["TransitionContext"], Callable[..., Any]]


@dataclass(frozen=True)
class StateDeclaration:
    """
    Declaration of a single state.

    Attributes:
        triggers: trigger name -> transition function
        payload_type: type every payload of this state must have.
            ``Any`` leaves the payload unchecked.
    """

    triggers: Mapping[str, TransitionFn] = field(default_factory=dict)
    payload_type: Any = Any


StatesTriggers = Mapping[str, Union[Mapping[str, TransitionFn], StateDeclaration]]


class StatesDeclaration:
    """
    Immutable registry of states, triggers and payload types.

    Accepts either plain ``{state: {trigger: fn}}`` mappings or
    ``{state: StateDeclaration(...)}`` entries (both may be mixed).
    """

    def __init__(self, states_triggers: StatesTriggers, validate_payloads: bool = True):
        if not states_triggers:
            raise MachineConfigurationError("States declaration must contain at least one state")

        entries: Dict[str, Mapping[str, TransitionFn]] = {}
        adapters: Dict[str, TypeAdapter] = {}

        for state, entry in states_triggers.items():
            if isinstance(entry, StateDeclaration):
                triggers, payload_type = entry.triggers, entry.payload_type
            elif entry is None:
                triggers, payload_type = {}, Any
            elif isinstance(entry, Mapping):
                triggers, payload_type = entry, Any
            else:
                raise MachineConfigurationError(
                    f"Invalid declaration for state {state!r}: expected a mapping of triggers",
                    details={"state": state, "type": type(entry).__name__},
                )

            for trigger, fn in triggers.items():
                if not callable(fn):
                    raise MachineConfigurationError(
                        f"Transition function for {state!r}.{trigger!r} is not callable",
                        details={"state": state, "trigger": trigger},
                    )

            # copy so later changes to the caller's mapping cannot leak in
            entries[state] = MappingProxyType(dict(triggers))
            if validate_payloads and payload_type is not Any:
                adapters[state] = TypeAdapter(payload_type)

        self._entries = MappingProxyType(entries)
        self._payload_adapters = MappingProxyType(adapters)

    def __contains__(self, state: object) -> bool:
        return state in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_all_states(self) -> List[str]:
        return list(self._entries)

    def get_all_triggers(self) -> List[str]:
        """Distinct trigger names across all states, in first-seen order."""
        return list(
            dict.fromkeys(trigger for triggers in self._entries.values() for trigger in triggers)
        )

    def get_state_triggers(self, state: str) -> List[str]:
        if state not in self._entries:
            raise InvalidStateError(state)
        return list(self._entries[state])

    def resolve(self, state: str, trigger: str) -> TransitionFn:
        """
        Look up the transition function bound to a trigger of a state.

        Raises:
            InvalidTriggerError: If the state does not declare the trigger
        """
        triggers = self._entries.get(state)
        if triggers is None or trigger not in triggers:
            available = list(triggers) if triggers is not None else []
            logger.error("invalid_trigger", state=state, trigger=trigger, available=available)
            raise InvalidTriggerError(state, trigger, available)
        return triggers[trigger]

    def require_state(self, state: str) -> None:
        if state not in self._entries:
            logger.error("invalid_state", state=state, declared=list(self._entries))
            raise InvalidStateError(state, details={"state": state, "declared": list(self._entries)})

    def validate_payload(self, state: str, payload: Any) -> None:
        """
        Check a payload against the type declared for its state.

        Validation runs in strict mode and never replaces the payload.

        Raises:
            PayloadValidationError: If the payload does not match
        """
        adapter = self._payload_adapters.get(state)
        if adapter is None:
            return
        try:
            adapter.validate_python(payload, strict=True)
        except ValidationError as e:
            logger.error("payload_validation_failed", state=state, error_count=e.error_count())
            raise PayloadValidationError(
                f"Payload for state {state!r} does not match its declared type",
                details={"state": state, "errors": e.errors(include_url=False)},
            ) from e
