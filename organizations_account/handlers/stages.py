from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Self

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from organizations_account.core.gateway import AccountGateway
from organizations_account.core.helpers.exceptions import (
    OPERATION_VERDICT_OVERRIDES,
    HandlerError,
    VerdictOverrides,
    classify_client_error,
    classify_create_failure,
    get_error_code,
    get_error_message,
)
from organizations_account.core.helpers.types import (
    GOV_CLOUD_PARTITION,
    AlternateContactType,
    CreateAccountState,
    HandlerErrorCode,
    RemoteOperation,
)
from organizations_account.models import (
    AccountSpec,
    AlternateContacts,
    CallbackContext,
    ObservedAccount,
)
from organizations_account.settings import HandlerSettings

RemoteError = (ClientError, BotoCoreError)


class OutcomeKind(StrEnum):
    CONTINUE = "CONTINUE"
    SUSPEND = "SUSPEND"
    FAIL = "FAIL"


@dataclass(frozen=True, slots=True)
class StageOutcome:
    kind: OutcomeKind
    delay_seconds: int = 0
    error_code: Optional[HandlerErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def advance(cls) -> Self:
        return cls(kind=OutcomeKind.CONTINUE)

    @classmethod
    def suspend(cls, delay_seconds: int) -> Self:
        return cls(kind=OutcomeKind.SUSPEND, delay_seconds=delay_seconds)

    @classmethod
    def fail(cls, error_code: HandlerErrorCode, message: str) -> Self:
        return cls(kind=OutcomeKind.FAIL, error_code=error_code, message=message)


@dataclass(frozen=True, slots=True)
class StageDelays:
    creation_poll: int
    retry: int
    stabilization: int

    @classmethod
    def from_settings(cls, settings: HandlerSettings) -> Self:
        return cls(
            creation_poll=settings.creation_poll_delay_seconds,
            retry=settings.retry_delay_seconds,
            stabilization=settings.stabilization_delay_seconds,
        )


@dataclass
class ReconciliationContext:
    """Everything one invocation threads through its stages."""

    spec: AccountSpec
    gateway: AccountGateway
    state: CallbackContext
    model: ObservedAccount
    delays: StageDelays
    partition: str = "aws"
    verdict_overrides: VerdictOverrides = OPERATION_VERDICT_OVERRIDES


class Stage(ABC):
    async def execute(self, ctx: ReconciliationContext) -> StageOutcome:
        logger.debug(f"Executing {self.__class__.__name__}")
        outcome = await self._execute(ctx)
        if outcome.kind is not OutcomeKind.CONTINUE:
            logger.info(
                f"{self.__class__.__name__} finished with {outcome.kind}"
                f" (delay={outcome.delay_seconds}, error_code={outcome.error_code})"
            )
        return outcome

    @abstractmethod
    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome: ...

    @staticmethod
    def _on_remote_failure(
        ctx: ReconciliationContext, e: Exception, operation: RemoteOperation
    ) -> StageOutcome:
        verdict = classify_client_error(e, operation, ctx.verdict_overrides)
        message = get_error_message(e)
        if verdict.retryable:
            logger.warning(
                f"{operation} failed with {get_error_code(e)}, retrying in {ctx.delays.retry}s: {message}"
            )
            return StageOutcome.suspend(ctx.delays.retry)

        error_code = verdict.error_code or HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        logger.error(f"{operation} failed with {error_code}: {message}")
        return StageOutcome.fail(error_code, f"{operation} failed: {message}")


def validate_create_request(spec: AccountSpec, partition: str) -> None:
    if partition == GOV_CLOUD_PARTITION:
        raise HandlerError(
            HandlerErrorCode.INVALID_REQUEST,
            "Accounts can not be created in the GovCloud partition through this handler",
        )
    if len(spec.parent_ids) > 1:
        raise HandlerError(
            HandlerErrorCode.INVALID_REQUEST,
            f"At most one parent id can be provided, got {len(spec.parent_ids)}",
        )
    if not spec.account_name or not spec.email:
        raise HandlerError(
            HandlerErrorCode.INVALID_REQUEST,
            "AccountName and Email are required to create an account",
        )


class ValidateCreateRequestStage(Stage):
    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        try:
            validate_create_request(ctx.spec, ctx.partition)
        except HandlerError as e:
            return StageOutcome.fail(e.error_code, e.message)
        return StageOutcome.advance()


class CreateAccountStage(Stage):
    """Submits CreateAccount once per lineage and hands control back to the host."""

    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        if ctx.state.account_created:
            logger.debug(
                f"Account creation already submitted as {ctx.state.create_account_request_id}"
            )
            return StageOutcome.advance()

        assert ctx.spec.account_name and ctx.spec.email
        try:
            request_id = await ctx.gateway.create_account(
                ctx.spec.account_name, ctx.spec.email, ctx.spec.tags
            )
        except RemoteError as e:
            return self._on_remote_failure(ctx, e, RemoteOperation.CREATE_ACCOUNT)

        ctx.state = ctx.state.model_copy(
            update={"account_created": True, "create_account_request_id": request_id}
        )
        return StageOutcome.suspend(ctx.delays.creation_poll)


class AwaitCreationStage(Stage):
    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        request_id = ctx.state.create_account_request_id
        if not request_id:
            return StageOutcome.fail(
                HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
                "Account creation was submitted but its request id was not kept",
            )

        try:
            status = await ctx.gateway.describe_create_account_status(request_id)
        except RemoteError as e:
            return self._on_remote_failure(
                ctx, e, RemoteOperation.DESCRIBE_CREATE_ACCOUNT_STATUS
            )

        if status.state == CreateAccountState.IN_PROGRESS:
            logger.info(f"Account creation {request_id} is still in progress")
            return StageOutcome.suspend(ctx.delays.creation_poll)

        if status.state == CreateAccountState.FAILED:
            ctx.model.create_account_request_id = request_id
            ctx.model.failure_reason = status.failure_reason
            return StageOutcome.fail(
                classify_create_failure(status.failure_reason),
                f"Account creation failed with reason [{status.failure_reason}]",
            )

        if not status.account_id:
            return StageOutcome.fail(
                HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
                f"Account creation {request_id} succeeded without an account id",
            )

        logger.info(f"Account creation {request_id} succeeded: {status.account_id}")
        ctx.model.account_id = status.account_id
        return StageOutcome.advance()


class MoveAccountStage(Stage):
    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        destination = ctx.spec.desired_parent_id
        if destination is None:
            return StageOutcome.advance()

        account_id = ctx.model.account_id
        assert account_id is not None
        try:
            parents = await ctx.gateway.list_parents(account_id)
        except RemoteError as e:
            return self._on_remote_failure(ctx, e, RemoteOperation.LIST_PARENTS)

        if not parents:
            return StageOutcome.fail(
                HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
                f"Account {account_id} is not attached to any parent",
            )

        source = parents[0]
        if source == destination:
            logger.info(f"Account {account_id} already under {destination}")
            ctx.model.parent_ids = [destination]
            return StageOutcome.advance()

        try:
            await ctx.gateway.move_account(account_id, source, destination)
        except RemoteError as e:
            if get_error_code(e) == "DuplicateAccountException" and (
                await self._is_under_parent(ctx, account_id, destination)
            ):
                logger.info(
                    f"MoveAccount reported a duplicate and {account_id} is already under {destination}"
                )
                ctx.model.parent_ids = [destination]
                return StageOutcome.advance()
            return self._on_remote_failure(ctx, e, RemoteOperation.MOVE_ACCOUNT)

        ctx.model.parent_ids = [destination]
        return StageOutcome.advance()

    @staticmethod
    async def _is_under_parent(
        ctx: ReconciliationContext, account_id: str, parent_id: str
    ) -> bool:
        try:
            return parent_id in await ctx.gateway.list_parents(account_id)
        except RemoteError as e:
            logger.warning(f"Could not confirm the parent of {account_id}: {e}")
            return False


class PutAlternateContactsStage(Stage):
    """
    Applies each supplied contact type independently. A contact that already
    matches is not written again; contacts written before a failure stay.
    """

    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        if ctx.spec.alternate_contacts is None or ctx.spec.alternate_contacts.is_empty():
            return StageOutcome.advance()

        account_id = ctx.model.account_id
        assert account_id is not None
        for contact_type, contact in ctx.spec.alternate_contacts.supplied():
            operation = RemoteOperation.GET_ALTERNATE_CONTACT
            try:
                current = await ctx.gateway.get_alternate_contact(
                    account_id, contact_type
                )
                if current == contact:
                    logger.debug(f"{contact_type} contact of {account_id} is up to date")
                    continue

                operation = RemoteOperation.PUT_ALTERNATE_CONTACT
                await ctx.gateway.put_alternate_contact(
                    account_id, contact_type, contact
                )
            except RemoteError as e:
                return self._on_remote_failure(ctx, e, operation)
            logger.info(f"Put {contact_type} alternate contact on {account_id}")

        return StageOutcome.advance()


class StabilizeStage(Stage):
    """
    Reads the account back into the output model.

    With `wait_for_parent`, a read-back that still lists a parent other than
    the desired one suspends instead of reporting the stale parent.
    """

    def __init__(
        self, wait_for_parent: bool = True, read_all_contacts: bool = False
    ) -> None:
        self.wait_for_parent = wait_for_parent
        self.read_all_contacts = read_all_contacts

    async def _execute(self, ctx: ReconciliationContext) -> StageOutcome:
        account_id = ctx.model.account_id
        assert account_id is not None
        operation = RemoteOperation.DESCRIBE_ACCOUNT
        try:
            ctx.model.apply_description(
                await ctx.gateway.describe_account(account_id)
            )

            operation = RemoteOperation.LIST_PARENTS
            parents = await ctx.gateway.list_parents(account_id)
            ctx.model.parent_ids = parents
            destination = ctx.spec.desired_parent_id
            if self.wait_for_parent and destination and destination not in parents:
                logger.info(
                    f"Account {account_id} still lists {parents}, waiting for {destination}"
                )
                return StageOutcome.suspend(ctx.delays.stabilization)

            operation = RemoteOperation.GET_ALTERNATE_CONTACT
            if self.read_all_contacts or ctx.spec.has_alternate_contacts():
                contacts = {
                    contact_type: await ctx.gateway.get_alternate_contact(
                        account_id, contact_type
                    )
                    for contact_type in AlternateContactType
                }
                observed = AlternateContacts.from_contacts(contacts)
                ctx.model.alternate_contacts = None if observed.is_empty() else observed
            else:
                ctx.model.alternate_contacts = None

            operation = RemoteOperation.LIST_TAGS_FOR_RESOURCE
            ctx.model.tags = await ctx.gateway.list_tags(account_id)
        except RemoteError as e:
            return self._on_remote_failure(ctx, e, operation)

        return StageOutcome.advance()
