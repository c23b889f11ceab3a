from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelType = Literal["ERROR", "WARNING", "INFO", "DEBUG", "CRITICAL"]


class HandlerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: LogLevelType = "INFO"
    log_json: bool = False
    # Organizations is a global service served out of us-east-1 in the aws partition
    region: str = "us-east-1"

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[SecretStr] = None
    aws_session_token: Optional[SecretStr] = None

    creation_poll_delay_seconds: int = Field(default=30, gt=0)
    retry_delay_seconds: int = Field(default=15, gt=0)
    stabilization_delay_seconds: int = Field(default=10, gt=0)

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)
