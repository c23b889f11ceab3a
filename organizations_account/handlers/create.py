from typing import Sequence

from organizations_account.handlers.base import BaseHandler
from organizations_account.handlers.stages import (
    AwaitCreationStage,
    CreateAccountStage,
    MoveAccountStage,
    PutAlternateContactsStage,
    Stage,
    StabilizeStage,
    ValidateCreateRequestStage,
)


class CreateHandler(BaseHandler):
    """
    Creates an Organizations member account.

    The host calls `handle_request` repeatedly, passing back the callback
    context of the previous IN_PROGRESS result. CreateAccount is submitted only
    while `account_created` is false; the move and the alternate contacts
    detect their own completion from what AWS reports.
    """

    _stages: tuple[Stage, ...] = (
        ValidateCreateRequestStage(),
        CreateAccountStage(),
        AwaitCreationStage(),
        MoveAccountStage(),
        PutAlternateContactsStage(),
        StabilizeStage(wait_for_parent=True),
    )

    @property
    def stages(self) -> Sequence[Stage]:
        return self._stages
