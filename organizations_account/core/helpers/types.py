from enum import StrEnum
from typing import Literal


class OperationStatus(StrEnum):
    SUCCESS = "SUCCESS"
    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"


class HandlerErrorCode(StrEnum):
    INVALID_REQUEST = "InvalidRequest"
    ALREADY_EXISTS = "AlreadyExists"
    ACCESS_DENIED = "AccessDenied"
    SERVICE_LIMIT_EXCEEDED = "ServiceLimitExceeded"
    GENERAL_SERVICE_EXCEPTION = "GeneralServiceException"
    NOT_FOUND = "NotFound"


class CreateAccountState(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class AlternateContactType(StrEnum):
    BILLING = "BILLING"
    OPERATIONS = "OPERATIONS"
    SECURITY = "SECURITY"


class RemoteOperation(StrEnum):
    """Organizations and Account API operations issued by the gateway."""

    CREATE_ACCOUNT = "CreateAccount"
    DESCRIBE_CREATE_ACCOUNT_STATUS = "DescribeCreateAccountStatus"
    DESCRIBE_ACCOUNT = "DescribeAccount"
    LIST_PARENTS = "ListParents"
    MOVE_ACCOUNT = "MoveAccount"
    PUT_ALTERNATE_CONTACT = "PutAlternateContact"
    GET_ALTERNATE_CONTACT = "GetAlternateContact"
    LIST_TAGS_FOR_RESOURCE = "ListTagsForResource"


class HandlerAction(StrEnum):
    CREATE = "CREATE"
    READ = "READ"


GOV_CLOUD_PARTITION = "aws-us-gov"

SupportedServices = Literal["organizations", "account"]
