import asyncio
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from organizations_account.auth import create_session
from organizations_account.core.gateway import open_account_gateway
from organizations_account.core.helpers.exceptions import CredentialsProviderError
from organizations_account.core.helpers.types import HandlerAction, HandlerErrorCode
from organizations_account.handlers import CreateHandler, ReadHandler
from organizations_account.handlers.base import BaseHandler
from organizations_account.logger_setup import setup_logger
from organizations_account.models import (
    CallbackContext,
    ObservedAccount,
    ProgressEvent,
    ResourceHandlerRequest,
)
from organizations_account.settings import HandlerSettings

HANDLERS: dict[HandlerAction, type[BaseHandler]] = {
    HandlerAction.CREATE: CreateHandler,
    HandlerAction.READ: ReadHandler,
}


async def handle_event(event: dict[str, Any], settings: HandlerSettings) -> ProgressEvent:
    """
    Serve one host invocation.

    The event carries `action` (CREATE or READ), the `request` and, on
    re-invocations, the `callbackContext` returned by the previous result.
    """
    try:
        action = HandlerAction(event.get("action", ""))
        request = ResourceHandlerRequest.model_validate(event.get("request") or {})
        callback_context = CallbackContext.from_persisted(event.get("callbackContext"))
    except (ValueError, ValidationError) as e:
        logger.error(f"Rejecting malformed event: {e}")
        return ProgressEvent.failed(
            ObservedAccount(), HandlerErrorCode.INVALID_REQUEST, f"Malformed request: {e}"
        )

    try:
        session = await create_session(settings)
    except CredentialsProviderError as e:
        logger.error(f"Could not build an AWS session: {e}")
        return ProgressEvent.failed(
            ObservedAccount.from_spec(request.desired_resource_state),
            HandlerErrorCode.ACCESS_DENIED,
            str(e),
        )

    async with open_account_gateway(session, settings.region) as gateway:
        handler_cls = HANDLERS[action]
        logger.info(f"Dispatching {action} to {handler_cls.__name__}")
        return await handler_cls(gateway, settings).handle_request(
            request, callback_context
        )


def handler(event: dict[str, Any], context: Optional[Any] = None) -> dict[str, Any]:
    settings = HandlerSettings()
    setup_logger(settings.log_level, serialize=settings.log_json)
    return asyncio.run(handle_event(event, settings)).to_response()
