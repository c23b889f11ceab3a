from abc import ABC, abstractmethod
from typing import Optional, Sequence

from loguru import logger

from organizations_account.core.gateway import AccountGateway
from organizations_account.core.helpers.exceptions import (
    OPERATION_VERDICT_OVERRIDES,
    VerdictOverrides,
    get_error_message,
)
from organizations_account.core.helpers.types import HandlerErrorCode
from organizations_account.handlers.stages import (
    OutcomeKind,
    ReconciliationContext,
    Stage,
    StageDelays,
)
from organizations_account.models import (
    CallbackContext,
    ObservedAccount,
    ProgressEvent,
    ResourceHandlerRequest,
)
from organizations_account.settings import HandlerSettings


class BaseHandler(ABC):
    """
    Runs a fixed sequence of stages once per host invocation.

    The first stage that does not continue decides the result: SUSPEND turns
    into IN_PROGRESS carrying the callback context, FAIL into FAILED. Once
    every stage continued the invocation is a SUCCESS. An unexpected exception
    inside a stage is logged and reported as a GeneralServiceException.
    """

    verdict_overrides: VerdictOverrides = OPERATION_VERDICT_OVERRIDES

    def __init__(self, gateway: AccountGateway, settings: HandlerSettings) -> None:
        self.gateway = gateway
        self.delays = StageDelays.from_settings(settings)

    @property
    @abstractmethod
    def stages(self) -> Sequence[Stage]: ...

    async def handle_request(
        self,
        request: ResourceHandlerRequest,
        callback_context: Optional[CallbackContext] = None,
    ) -> ProgressEvent:
        spec = request.desired_resource_state
        ctx = ReconciliationContext(
            spec=spec,
            gateway=self.gateway,
            state=callback_context or CallbackContext(),
            model=ObservedAccount.from_spec(spec),
            delays=self.delays,
            partition=request.aws_partition,
            verdict_overrides=self.verdict_overrides,
        )

        with logger.contextualize(
            account_name=spec.account_name, account_id=spec.account_id
        ):
            try:
                return await self._run_stages(ctx)
            except Exception as e:
                logger.exception(f"{self.__class__.__name__} failed unexpectedly")
                return ProgressEvent.failed(
                    ctx.model,
                    HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
                    get_error_message(e),
                )

    async def _run_stages(self, ctx: ReconciliationContext) -> ProgressEvent:
        for stage in self.stages:
            outcome = await stage.execute(ctx)
            if outcome.kind is OutcomeKind.SUSPEND:
                return ProgressEvent.in_progress(
                    ctx.model, ctx.state, outcome.delay_seconds
                )
            if outcome.kind is OutcomeKind.FAIL:
                assert outcome.error_code and outcome.message
                return ProgressEvent.failed(
                    ctx.model, outcome.error_code, outcome.message
                )

        logger.info(f"{self.__class__.__name__} succeeded for {ctx.model.account_id}")
        return ProgressEvent.success(ctx.model)
