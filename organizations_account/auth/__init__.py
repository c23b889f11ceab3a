from organizations_account.auth.providers import (
    CredentialProvider,
    DefaultCredentialProvider,
    StaticCredentialProvider,
)
from organizations_account.auth.session_factory import create_session

__all__ = [
    "CredentialProvider",
    "DefaultCredentialProvider",
    "StaticCredentialProvider",
    "create_session",
]
