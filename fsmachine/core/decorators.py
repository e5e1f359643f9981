"""
Decorators for declaring transition functions.

A transition function is declared in curried form: it receives the
TransitionContext and returns the callable that takes the trigger arguments.
The decorator lets a trigger be written as a single flat function instead.
"""

from functools import partial, wraps
from typing import Callable


def trigger_handler(func: Callable) -> Callable:
    """
    Adapt a flat ``func(ctx, *args)`` into the curried ``ctx -> (*args)`` form.

    Works for both plain functions and coroutine functions; for the latter the
    inner call returns a coroutine, which the engine awaits.

    Usage:
        @trigger_handler
        async def verify(ctx, email: str, password: str):
            ...
            ctx.transition("verify_success", {"user_id": "u1"})

        states_triggers = {"credentials": {"verify": verify}}
    """
    @wraps(func)
    def bind_context(ctx):
        return partial(func, ctx)

    return bind_context
