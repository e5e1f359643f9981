"""Context handed to a transition function when its trigger is invoked."""

from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass(frozen=True)
class TransitionContext:
    """
    Snapshot of the machine taken just before the trigger runs.

    Attributes:
        state: State the trigger was invoked in
        payload: Payload of that state
        is_blocked: Blocked status before the invocation was accepted
        transition: Commits ``(next_state, next_payload)`` on the machine
        get_all_states: Lists every declared state
    """

    state: str
    payload: Any
    is_blocked: bool
    transition: Callable[[str, Any], None]
    get_all_states: Callable[[], List[str]]
