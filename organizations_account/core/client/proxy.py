from typing import Any, Optional, Self

from aiobotocore.client import AioBaseClient
from aiobotocore.session import AioSession
from loguru import logger

from organizations_account.core.helpers.types import SupportedServices


class AioBaseClientProxy:
    """Owns one aiobotocore client for the lifetime of an `async with` block."""

    def __init__(
        self, session: AioSession, region: str, service_name: SupportedServices
    ) -> None:
        self.session = session
        self.region = region
        self.service_name: SupportedServices = service_name
        self._client_cm: Optional[Any] = None
        self._client: Optional[AioBaseClient] = None

    @property
    def client(self) -> AioBaseClient:
        if self._client is None:
            raise RuntimeError(
                f"{self.service_name} client is not open, use 'async with' first"
            )
        return self._client

    async def __aenter__(self) -> Self:
        self._client_cm = self.session.create_client(
            service_name=self.service_name, region_name=self.region
        )
        self._client = await self._client_cm.__aenter__()
        logger.debug(f"Opened {self.service_name} client in {self.region}")
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self._client_cm is None:
            return
        try:
            await self._client_cm.__aexit__(exc_type, exc, tb)
        finally:
            self._client_cm = None
            self._client = None
            logger.debug(f"Closed {self.service_name} client")
