"""Pytest configuration and shared fixtures for fsmachine tests."""

import asyncio

import pytest

from fsmachine import FSMachine

USER_PAYLOAD = {"userId": "u1", "userName": "ADMIN"}


class VerificationBackendDown(RuntimeError):
    pass


@pytest.fixture
def release() -> asyncio.Event:
    """Gate that keeps the async verify trigger in flight until set."""
    return asyncio.Event()


@pytest.fixture
def states_triggers(release):
    """Login-style declaration: credentials -> verifySuccess | verifyFail."""

    def verify(api):
        def run(email, password):
            success = bool(email and password)
            if success:
                api.transition("verifySuccess", dict(USER_PAYLOAD))
            else:
                api.transition("verifyFail", None)
        return run

    def verify_async(api):
        async def run(email, password):
            await release.wait()
            api.transition("verifySuccess", dict(USER_PAYLOAD))
        return run

    def verify_broken(api):
        def run(email, password):
            raise VerificationBackendDown("verification backend down")
        return run

    def noop(api):
        return lambda: None

    return {
        "credentials": {
            "verify": verify,
            "verifyAsync": verify_async,
            "verifyBroken": verify_broken,
            "noop": noop,
        },
        "verifySuccess": {},
        "verifyFail": {
            "retry": lambda api: lambda: api.transition("credentials", None),
        },
    }


@pytest.fixture
def machine(states_triggers) -> FSMachine:
    return FSMachine(
        initial_state="credentials",
        initial_payload=None,
        states_triggers=states_triggers,
        trigger_timeout=None,
        name="test-login",
    )
