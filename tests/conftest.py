from typing import Any, AsyncGenerator, Union
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from organizations_account.core.gateway import AccountGateway
from organizations_account.models import (
    AccountSpec,
    AlternateContact,
    AlternateContacts,
    ResourceHandlerRequest,
    Tag,
)
from organizations_account.settings import HandlerSettings

TEST_ACCOUNT_ID = "123456789012"
TEST_ACCOUNT_NAME = "test-account"
TEST_ACCOUNT_EMAIL = "test-account@example.com"
TEST_ORGANIZATION_ID = "o-exampleorgid"
TEST_ACCOUNT_ARN = (
    f"arn:aws:organizations::111111111111:account/{TEST_ORGANIZATION_ID}/{TEST_ACCOUNT_ID}"
)
CREATE_ACCOUNT_REQUEST_ID = "car-examplecreateaccountrequestid111"
TEST_SOURCE_PARENT_ID = "r-abcd"
TEST_DESTINATION_PARENT_ID = "ou-abcd-11111111"

CREATION_POLL_DELAY = 30
RETRY_DELAY = 15
STABILIZATION_DELAY = 10

BILLING_CONTACT = AlternateContact(
    name="Billing Name",
    title="Finance",
    email_address="billing@example.com",
    phone_number="+1-206-555-0100",
)
OPERATIONS_CONTACT = AlternateContact(
    name="Operations Name",
    title="Operator",
    email_address="operations@example.com",
    phone_number="+1-206-555-0101",
)
SECURITY_CONTACT = AlternateContact(
    name="Security Name",
    title="CISO",
    email_address="security@example.com",
    phone_number="+1-206-555-0102",
)
DEFAULT_TAGS = [Tag(key="team", value="platform"), Tag(key="env", value="prod")]

PageResponse = Union[dict[str, Any], Exception]


def make_client_error(
    code: str, operation: str, message: str = "Something went wrong"
) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def parents_page(*parent_ids: str) -> dict[str, Any]:
    return {
        "Parents": [
            {"Id": parent_id, "Type": "ORGANIZATIONAL_UNIT"} for parent_id in parent_ids
        ]
    }


def tags_page(tags: list[Tag]) -> dict[str, Any]:
    return {"Tags": [tag.model_dump(by_alias=True) for tag in tags]}


def create_status_response(
    state: str, failure_reason: str | None = None
) -> dict[str, Any]:
    status: dict[str, Any] = {
        "Id": CREATE_ACCOUNT_REQUEST_ID,
        "AccountName": TEST_ACCOUNT_NAME,
        "State": state,
    }
    if state == "SUCCEEDED":
        status["AccountId"] = TEST_ACCOUNT_ID
    if failure_reason:
        status["FailureReason"] = failure_reason
    return {"CreateAccountStatus": status}


class FakePaginator:
    """Serves one response per paginate() call and keeps repeating the last one."""

    def __init__(self, *responses: PageResponse) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def set_responses(self, *responses: PageResponse) -> None:
        self.responses = list(responses)

    def paginate(self, **kwargs: Any) -> AsyncGenerator[dict[str, Any], None]:
        self.calls.append(kwargs)
        response = (
            self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        )
        return self._pages(response)

    @staticmethod
    async def _pages(response: PageResponse) -> AsyncGenerator[dict[str, Any], None]:
        if isinstance(response, Exception):
            raise response
        yield response


class FakeAlternateContactStore:
    """Backs get/put_alternate_contact with an in-memory dict."""

    def __init__(self) -> None:
        self.contacts: dict[str, dict[str, Any]] = {}

    async def put(self, **kwargs: Any) -> dict[str, Any]:
        contact = {key: value for key, value in kwargs.items() if key != "AccountId"}
        self.contacts[kwargs["AlternateContactType"]] = contact
        return {}

    async def get(self, **kwargs: Any) -> dict[str, Any]:
        contact_type = kwargs["AlternateContactType"]
        if contact_type not in self.contacts:
            raise make_client_error(
                "ResourceNotFoundException",
                "GetAlternateContact",
                "No contact of the requested type found",
            )
        return {"AlternateContact": dict(self.contacts[contact_type])}

    def prefill(self, contact_type: str, contact: AlternateContact) -> None:
        self.contacts[contact_type] = {
            "AlternateContactType": contact_type,
            **contact.to_request(),
        }


@pytest.fixture
def parents_paginator() -> FakePaginator:
    return FakePaginator(parents_page(TEST_SOURCE_PARENT_ID))


@pytest.fixture
def tags_paginator() -> FakePaginator:
    return FakePaginator(tags_page(DEFAULT_TAGS))


@pytest.fixture
def organizations_client(
    parents_paginator: FakePaginator, tags_paginator: FakePaginator
) -> AsyncMock:
    """Mocked aiobotocore organizations client with a successful happy path."""
    client = AsyncMock()
    paginators = {
        "list_parents": parents_paginator,
        "list_tags_for_resource": tags_paginator,
    }
    client.get_paginator = MagicMock(side_effect=lambda name: paginators[name])
    client.create_account.return_value = create_status_response("IN_PROGRESS")
    client.describe_create_account_status.return_value = create_status_response(
        "SUCCEEDED"
    )
    client.describe_account.return_value = {
        "Account": {
            "Id": TEST_ACCOUNT_ID,
            "Arn": TEST_ACCOUNT_ARN,
            "Email": TEST_ACCOUNT_EMAIL,
            "Name": TEST_ACCOUNT_NAME,
            "Status": "ACTIVE",
            "JoinedMethod": "CREATED",
        }
    }
    client.move_account.return_value = {}
    return client


@pytest.fixture
def contact_store() -> FakeAlternateContactStore:
    return FakeAlternateContactStore()


@pytest.fixture
def account_client(contact_store: FakeAlternateContactStore) -> AsyncMock:
    """Mocked aiobotocore account client backed by an in-memory contact store."""
    client = AsyncMock()
    client.put_alternate_contact.side_effect = contact_store.put
    client.get_alternate_contact.side_effect = contact_store.get
    return client


@pytest.fixture
def gateway(organizations_client: AsyncMock, account_client: AsyncMock) -> AccountGateway:
    return AccountGateway(organizations_client, account_client)


@pytest.fixture
def handler_settings() -> HandlerSettings:
    return HandlerSettings(
        _env_file=None,
        creation_poll_delay_seconds=CREATION_POLL_DELAY,
        retry_delay_seconds=RETRY_DELAY,
        stabilization_delay_seconds=STABILIZATION_DELAY,
    )


@pytest.fixture
def account_spec() -> AccountSpec:
    """Desired account with a parent OU, all three contacts and tags."""
    return AccountSpec(
        account_name=TEST_ACCOUNT_NAME,
        email=TEST_ACCOUNT_EMAIL,
        parent_ids=[TEST_DESTINATION_PARENT_ID],
        alternate_contacts=AlternateContacts(
            billing=BILLING_CONTACT,
            operations=OPERATIONS_CONTACT,
            security=SECURITY_CONTACT,
        ),
        tags=DEFAULT_TAGS,
    )


@pytest.fixture
def create_request(account_spec: AccountSpec) -> ResourceHandlerRequest:
    return ResourceHandlerRequest(desired_resource_state=account_spec)
