import sys

import loguru
from loguru import logger

from organizations_account.settings import LogLevelType

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[handler]}</cyan> | "
    "<level>{message}</level>"
)


def setup_logger(level: LogLevelType, serialize: bool = False) -> None:
    """
    Route loguru to stdout. Hosts that ingest structured logs (e.g. CloudWatch
    from a Lambda runtime) should pass serialize=True to get one JSON record
    per line instead of the colored format.
    """
    logger_format = LOG_FORMAT
    if level == "DEBUG":
        logger_format += " | {extra}"

    logger.remove()
    logger.configure(
        extra={"handler": "organizations-account"}, patcher=exception_deserializer
    )
    logger.add(
        sys.stdout,
        level=level.upper(),
        format=logger_format,
        serialize=serialize,
        colorize=not serialize,
        diagnose=False,  # hide variable values in log backtrace
    )


def exception_deserializer(record: "loguru.Record") -> None:
    """
    loguru can't deserialize `Exception` subclasses such as botocore's
    ClientError, so the logged exception is flattened to a plain Exception.
    https://github.com/Delgan/loguru/issues/504#issuecomment-917365972
    """
    logged = record["exception"]
    if logged is None or logged.value is None:
        return
    flattened = Exception(f"{type(logged.value).__name__}: {logged.value}")
    record["exception"] = logged._replace(value=flattened)
