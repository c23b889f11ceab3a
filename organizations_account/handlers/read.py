from typing import Sequence

from organizations_account.core.helpers.exceptions import READ_VERDICT_OVERRIDES
from organizations_account.core.helpers.types import HandlerErrorCode
from organizations_account.handlers.base import BaseHandler
from organizations_account.handlers.stages import (
    ReconciliationContext,
    Stage,
    StabilizeStage,
    StageOutcome,
)


class ValidateReadRequestStage(Stage):
    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        if not ctx.spec.account_id:
            return StageOutcome.fail(
                HandlerErrorCode.NOT_FOUND, "AccountId is required to read an account"
            )
        return StageOutcome.advance()


class ReadHandler(BaseHandler):
    """Reports the current state of an existing account, all contact types included."""

    verdict_overrides = READ_VERDICT_OVERRIDES

    _stages: tuple[Stage, ...] = (
        ValidateReadRequestStage(),
        StabilizeStage(wait_for_parent=False, read_all_contacts=True),
    )

    @property
    def stages(self) -> Sequence[Stage]:
        return self._stages
