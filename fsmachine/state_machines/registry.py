"""
Flow registry for dynamic instantiation.

Provides a factory function to create machine engines by flow type.
"""

from typing import Any, Dict

from .machine import FSMachine


FLOW_REGISTRY: Dict[str, str] = {
    "login": "Multi-factor login wizard",
}


def get_flow_machine(flow_type: str, **kwargs: Any) -> FSMachine:
    """
    Factory to instantiate a machine engine by flow type.

    Args:
        flow_type: Type of flow (login)
        **kwargs: Options of the flow's declaration builder
            (e.g. preferred_send_method, check_code, delay_seconds)
            plus ``on_transition_done``, ``on_trigger_invoke``,
            ``trigger_timeout`` and ``name`` for the engine

    Returns:
        Machine engine in the flow's initial state

    Raises:
        ValueError: If flow_type is not registered
    """
    if flow_type not in FLOW_REGISTRY:
        raise ValueError(
            f"Unknown flow type: {flow_type}. "
            f"Available: {list(FLOW_REGISTRY.keys())}"
        )

    machine_kwargs = {
        key: kwargs.pop(key)
        for key in ("on_transition_done", "on_trigger_invoke", "trigger_timeout", "name")
        if key in kwargs
    }
    machine_kwargs.setdefault("name", flow_type)

    if flow_type == "login":
        from .login_flow import INITIAL_STEP, build_login_declaration
        return FSMachine(
            initial_state=INITIAL_STEP,
            initial_payload=None,
            states_triggers=build_login_declaration(**kwargs),
            **machine_kwargs,
        )
    else:
        raise ValueError(f"Flow type {flow_type} not implemented yet")
