"""
Multi-factor login flow.

Steps:
- welcome → user_credentials (start)
- user_credentials → verification_code | login_failure (validate)
- verification_code → login_success | login_failure (validate)
- verification_code ⇄ change_send_method (change_send_method, resend_verification_code, cancel)
- login_failure → user_credentials (retry)

Credential and code checks are pluggable; the defaults only accept
non-empty credentials and the code "1234" after a simulated network delay.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

import structlog
from pydantic import BaseModel

from fsmachine.core.config import settings
from fsmachine.core.decorators import trigger_handler

from .context import TransitionContext
from .declaration import StateDeclaration

logger = structlog.get_logger(__name__)


class SendMethod(str, Enum):
    APPLICATION = "application"
    SMS = "sms"
    EMAIL = "email"


class CredentialsPayload(BaseModel):
    send_method: Optional[SendMethod] = None


class SendMethodPayload(BaseModel):
    send_method: SendMethod


INITIAL_STEP = "welcome"

CredentialsCheck = Callable[[str, str], Awaitable[bool]]
CodeCheck = Callable[[str], Awaitable[bool]]


async def accept_non_empty_credentials(email: str, password: str) -> bool:
    return bool(email and password)


async def accept_demo_code(code: str) -> bool:
    return code == "1234"


def build_login_declaration(
    preferred_send_method: SendMethod = SendMethod.APPLICATION,
    check_credentials: Optional[CredentialsCheck] = None,
    check_code: Optional[CodeCheck] = None,
    delay_seconds: Optional[float] = None,
) -> Dict[str, StateDeclaration]:
    """
    Build the states declaration of the login flow.

    Args:
        preferred_send_method: Send method offered when credentials are requested
        check_credentials: Async (email, password) -> bool
        check_code: Async (code) -> bool
        delay_seconds: Simulated latency of each check.
            Defaults to settings.login_flow_delay_seconds

    Returns:
        Declaration usable as ``states_triggers`` of an FSMachine
    """
    check_credentials = check_credentials or accept_non_empty_credentials
    check_code = check_code or accept_demo_code
    if delay_seconds is None:
        delay_seconds = settings.login_flow_delay_seconds

    @trigger_handler
    def start(ctx: TransitionContext):
        ctx.transition("user_credentials", CredentialsPayload(send_method=preferred_send_method))

    @trigger_handler
    async def validate_credentials(ctx: TransitionContext, email: str, password: str, send_method: SendMethod):
        await asyncio.sleep(delay_seconds)
        if await check_credentials(email, password):
            send_method = SendMethod(send_method)
            logger.info("credentials_valid", send_method=send_method.value)
            ctx.transition("verification_code", SendMethodPayload(send_method=send_method))
        else:
            logger.info("credentials_invalid", email_provided=bool(email))
            ctx.transition("login_failure", None)

    @trigger_handler
    async def validate_code(ctx: TransitionContext, code: str):
        await asyncio.sleep(delay_seconds)
        if await check_code(code):
            logger.info("verification_code_valid")
            ctx.transition("login_success", None)
        else:
            logger.info("verification_code_invalid")
            ctx.transition("login_failure", None)

    @trigger_handler
    def change_send_method(ctx: TransitionContext):
        ctx.transition("change_send_method", SendMethodPayload(send_method=ctx.payload.send_method))

    @trigger_handler
    def resend_verification_code(ctx: TransitionContext, send_method: SendMethod):
        send_method = SendMethod(send_method)
        logger.info("verification_code_resent", send_method=send_method.value)
        ctx.transition("verification_code", SendMethodPayload(send_method=send_method))

    @trigger_handler
    def cancel(ctx: TransitionContext):
        ctx.transition("verification_code", SendMethodPayload(send_method=ctx.payload.send_method))

    @trigger_handler
    def retry(ctx: TransitionContext):
        logger.info("login_retry")
        ctx.transition("user_credentials", CredentialsPayload(send_method=preferred_send_method))

    return {
        INITIAL_STEP: StateDeclaration(
            triggers={"start": start},
            payload_type=None,
        ),
        "user_credentials": StateDeclaration(
            triggers={"validate": validate_credentials},
            payload_type=CredentialsPayload,
        ),
        "verification_code": StateDeclaration(
            triggers={"validate": validate_code, "change_send_method": change_send_method},
            payload_type=SendMethodPayload,
        ),
        "change_send_method": StateDeclaration(
            triggers={"resend_verification_code": resend_verification_code, "cancel": cancel},
            payload_type=SendMethodPayload,
        ),
        # final state - no triggers
        "login_success": StateDeclaration(payload_type=None),
        "login_failure": StateDeclaration(
            triggers={"retry": retry},
            payload_type=None,
        ),
    }
