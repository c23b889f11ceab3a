from organizations_account.handlers import CreateHandler, ReadHandler
from organizations_account.models import (
    AccountSpec,
    CallbackContext,
    ObservedAccount,
    ProgressEvent,
    ResourceHandlerRequest,
)

__all__ = [
    "AccountSpec",
    "CallbackContext",
    "CreateHandler",
    "ObservedAccount",
    "ProgressEvent",
    "ReadHandler",
    "ResourceHandlerRequest",
]
