from aiobotocore.session import AioSession
from loguru import logger

from organizations_account.auth.providers import (
    CredentialProvider,
    DefaultCredentialProvider,
    StaticCredentialProvider,
)
from organizations_account.settings import HandlerSettings


def detect_provider(settings: HandlerSettings) -> CredentialProvider:
    if settings.has_static_credentials:
        logger.info("Using StaticCredentialProvider (found aws_access_key_id)")
        assert settings.aws_secret_access_key is not None
        return StaticCredentialProvider(
            settings.aws_access_key_id,
            settings.aws_secret_access_key.get_secret_value(),
            (
                settings.aws_session_token.get_secret_value()
                if settings.aws_session_token
                else None
            ),
        )

    logger.info("Using DefaultCredentialProvider")
    return DefaultCredentialProvider()


async def create_session(settings: HandlerSettings) -> AioSession:
    return await detect_provider(settings).get_session()
