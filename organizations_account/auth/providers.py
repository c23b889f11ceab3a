from abc import ABC, abstractmethod
from typing import Optional

from aiobotocore.credentials import AioCredentials
from aiobotocore.session import AioSession

from organizations_account.core.helpers.exceptions import CredentialsProviderError


class CredentialProvider(ABC):
    """Resolves the credentials the Organizations and Account clients sign with."""

    @abstractmethod
    async def get_credentials(self) -> Optional[AioCredentials]: ...

    @abstractmethod
    async def get_session(self) -> AioSession: ...


class StaticCredentialProvider(CredentialProvider):
    """Access keys configured on the handler, with an optional session token."""

    def __init__(
        self,
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        session_token: Optional[str] = None,
    ) -> None:
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.session_token = session_token

    async def get_credentials(self) -> AioCredentials:
        if not (self.access_key_id and self.secret_access_key):
            raise CredentialsProviderError(
                "Static credentials need both an access key id and a secret access key"
            )
        return AioCredentials(
            self.access_key_id, self.secret_access_key, token=self.session_token
        )

    async def get_session(self) -> AioSession:
        session = AioSession()
        # AioSession resolves credentials lazily and keeps them on this attribute
        session._credentials = await self.get_credentials()  # type: ignore[attr-defined]
        return session


class DefaultCredentialProvider(CredentialProvider):
    """
    Defer to botocore's default chain (environment, shared config, the
    execution role of the host runtime).
    """

    def __init__(self) -> None:
        self._session = AioSession()

    async def get_credentials(self) -> Optional[AioCredentials]:
        return await self._session.get_credentials()

    async def get_session(self) -> AioSession:
        if await self.get_credentials() is None:
            raise CredentialsProviderError(
                "No AWS credentials found in the default credential chain"
            )
        return self._session
