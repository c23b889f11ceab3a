from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from aiobotocore.session import AioSession
from loguru import logger

from organizations_account.core.client.paginator import AsyncPaginator
from organizations_account.core.client.proxy import AioBaseClientProxy
from organizations_account.core.helpers.exceptions import (
    is_resource_not_found_exception,
)
from organizations_account.core.helpers.types import AlternateContactType
from organizations_account.models import (
    AccountDescription,
    AlternateContact,
    CreateAccountStatus,
    Tag,
)


class AccountGateway:
    """
    Thin adapter over the Organizations and Account Management clients.

    It holds no state of its own; botocore ClientErrors propagate to the caller
    untouched so they can be classified per stage.
    """

    def __init__(self, organizations_client: Any, account_client: Any) -> None:
        # aiobotocore declares the service operations only at runtime
        self.organizations: Any = organizations_client
        self.account: Any = account_client

    async def create_account(
        self, account_name: str, email: str, tags: list[Tag]
    ) -> str:
        request: dict[str, Any] = {"AccountName": account_name, "Email": email}
        if tags:
            request["Tags"] = [tag.model_dump(by_alias=True) for tag in tags]

        response = await self.organizations.create_account(**request)
        request_id = response["CreateAccountStatus"]["Id"]
        logger.info(f"Submitted account creation for {account_name}: {request_id}")
        return request_id

    async def describe_create_account_status(
        self, create_account_request_id: str
    ) -> CreateAccountStatus:
        response = await self.organizations.describe_create_account_status(
            CreateAccountRequestId=create_account_request_id
        )
        return CreateAccountStatus.model_validate(response["CreateAccountStatus"])

    async def describe_account(self, account_id: str) -> AccountDescription:
        response = await self.organizations.describe_account(AccountId=account_id)
        return AccountDescription.model_validate(response["Account"])

    async def list_parents(self, account_id: str) -> list[str]:
        paginator = AsyncPaginator(self.organizations, "list_parents", "Parents")
        parents = await paginator.collect(ChildId=account_id)
        return [parent["Id"] for parent in parents]

    async def move_account(
        self, account_id: str, source_parent_id: str, destination_parent_id: str
    ) -> None:
        await self.organizations.move_account(
            AccountId=account_id,
            SourceParentId=source_parent_id,
            DestinationParentId=destination_parent_id,
        )
        logger.info(
            f"Moved account {account_id} from {source_parent_id} to {destination_parent_id}"
        )

    async def put_alternate_contact(
        self,
        account_id: str,
        contact_type: AlternateContactType,
        contact: AlternateContact,
    ) -> None:
        await self.account.put_alternate_contact(
            AccountId=account_id,
            AlternateContactType=contact_type.value,
            **contact.to_request(),
        )

    async def get_alternate_contact(
        self, account_id: str, contact_type: AlternateContactType
    ) -> Optional[AlternateContact]:
        try:
            response = await self.account.get_alternate_contact(
                AccountId=account_id, AlternateContactType=contact_type.value
            )
        except Exception as e:
            if is_resource_not_found_exception(e):
                logger.debug(f"No {contact_type} alternate contact on {account_id}")
                return None
            raise
        return AlternateContact.model_validate(response["AlternateContact"])

    async def list_tags(self, account_id: str) -> list[Tag]:
        paginator = AsyncPaginator(
            self.organizations, "list_tags_for_resource", "Tags"
        )
        tags = await paginator.collect(ResourceId=account_id)
        return [Tag.model_validate(tag) for tag in tags]


@asynccontextmanager
async def open_account_gateway(
    session: AioSession, region: str
) -> AsyncIterator[AccountGateway]:
    async with (
        AioBaseClientProxy(session, region, "organizations") as organizations,
        AioBaseClientProxy(session, region, "account") as account,
    ):
        yield AccountGateway(organizations.client, account.client)
