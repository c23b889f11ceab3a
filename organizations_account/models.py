from datetime import datetime
from typing import Any, Iterator, Optional, Self

from botocore.utils import ArnParser, InvalidArnException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_pascal

from organizations_account.core.helpers.types import (
    AlternateContactType,
    CreateAccountState,
    HandlerErrorCode,
    OperationStatus,
)


class ResourceModel(BaseModel):
    """Base for models exchanged with AWS and the host, using PascalCase keys."""

    model_config = ConfigDict(
        alias_generator=to_pascal, populate_by_name=True, extra="ignore"
    )


class Tag(ResourceModel):
    key: str
    value: str


class AlternateContact(ResourceModel):
    name: Optional[str] = None
    title: Optional[str] = None
    email_address: Optional[str] = None
    phone_number: Optional[str] = None

    def to_request(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AlternateContacts(ResourceModel):
    billing: Optional[AlternateContact] = None
    operations: Optional[AlternateContact] = None
    security: Optional[AlternateContact] = None

    def supplied(self) -> Iterator[tuple[AlternateContactType, AlternateContact]]:
        """Yield the contact types that carry data, in a fixed order."""
        for contact_type in AlternateContactType:
            contact = getattr(self, contact_type.lower())
            if contact is not None:
                yield contact_type, contact

    def is_empty(self) -> bool:
        return next(self.supplied(), None) is None

    @classmethod
    def from_contacts(
        cls, contacts: dict[AlternateContactType, Optional[AlternateContact]]
    ) -> Self:
        return cls(
            **{contact_type.lower(): contact for contact_type, contact in contacts.items()}
        )


class AccountSpec(ResourceModel):
    """Desired state of an account as requested by the host."""

    account_name: Optional[str] = None
    email: Optional[str] = None
    parent_ids: list[str] = Field(default_factory=list)
    alternate_contacts: Optional[AlternateContacts] = None
    tags: list[Tag] = Field(default_factory=list)
    account_id: Optional[str] = Field(
        default=None, description="Primary identifier, only set on read requests"
    )

    @property
    def desired_parent_id(self) -> Optional[str]:
        return self.parent_ids[0] if self.parent_ids else None

    def has_alternate_contacts(self) -> bool:
        return self.alternate_contacts is not None and not self.alternate_contacts.is_empty()


class CreateAccountStatus(ResourceModel):
    id: str
    state: CreateAccountState
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    failure_reason: Optional[str] = None


class AccountDescription(ResourceModel):
    id: str
    arn: str
    email: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    joined_method: Optional[str] = None
    joined_timestamp: Optional[datetime] = None

    @property
    def organization_id(self) -> Optional[str]:
        # arn:aws:organizations::<management account>:account/<org id>/<account id>
        try:
            resource = ArnParser().parse_arn(self.arn)["resource"]
        except InvalidArnException:
            return None
        parts = resource.split("/")
        return parts[1] if len(parts) == 3 else None


class ObservedAccount(ResourceModel):
    """
    Authoritative output model.

    Seeded from the desired spec so a failed invocation still reports what was
    requested; every stage overwrites only the fields it observed.
    """

    account_id: Optional[str] = None
    arn: Optional[str] = None
    organization_id: Optional[str] = None
    account_name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    joined_method: Optional[str] = None
    joined_timestamp: Optional[datetime] = None
    parent_ids: list[str] = Field(default_factory=list)
    alternate_contacts: Optional[AlternateContacts] = None
    tags: list[Tag] = Field(default_factory=list)
    create_account_request_id: Optional[str] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_spec(cls, spec: AccountSpec) -> Self:
        return cls(
            account_id=spec.account_id,
            account_name=spec.account_name,
            email=spec.email,
            parent_ids=list(spec.parent_ids),
            alternate_contacts=(
                spec.alternate_contacts.model_copy(deep=True)
                if spec.alternate_contacts
                else None
            ),
            tags=[tag.model_copy() for tag in spec.tags],
        )

    def apply_description(self, description: AccountDescription) -> None:
        self.account_id = description.id
        self.arn = description.arn
        self.organization_id = description.organization_id
        self.account_name = description.name
        self.email = description.email
        self.status = description.status
        self.joined_method = description.joined_method
        self.joined_timestamp = description.joined_timestamp


class CallbackContext(BaseModel):
    """
    Continuation state handed back to the host between invocations.

    Only these two fields survive across invocations, everything else is
    re-read from AWS.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    account_created: bool = Field(default=False, alias="accountCreated")
    create_account_request_id: Optional[str] = Field(
        default=None, alias="createRequestToken"
    )

    @classmethod
    def from_persisted(cls, data: Optional[dict[str, Any]]) -> Self:
        return cls.model_validate(data or {})

    def to_persisted(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResourceHandlerRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    desired_resource_state: AccountSpec = Field(default_factory=AccountSpec)
    aws_partition: str = "aws"


class ProgressEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: OperationStatus
    resource_model: Optional[ObservedAccount] = None
    callback_context: Optional[CallbackContext] = None
    callback_delay_seconds: int = 0
    error_code: Optional[HandlerErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, model: ObservedAccount) -> Self:
        return cls(status=OperationStatus.SUCCESS, resource_model=model)

    @classmethod
    def in_progress(
        cls, model: ObservedAccount, context: CallbackContext, delay_seconds: int
    ) -> Self:
        if delay_seconds <= 0:
            raise ValueError("callback delay must be a positive number of seconds")
        return cls(
            status=OperationStatus.IN_PROGRESS,
            resource_model=model,
            callback_context=context,
            callback_delay_seconds=delay_seconds,
        )

    @classmethod
    def failed(
        cls, model: ObservedAccount, error_code: HandlerErrorCode, message: str
    ) -> Self:
        return cls(
            status=OperationStatus.FAILED,
            resource_model=model,
            error_code=error_code,
            message=message,
        )

    def to_response(self) -> dict[str, Any]:
        response = self.model_dump(
            by_alias=True, exclude_none=True, exclude={"callback_context"}, mode="json"
        )
        if self.callback_context is not None:
            response["callbackContext"] = self.callback_context.to_persisted()
        return response
