from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from organizations_account.core.helpers.types import HandlerErrorCode, RemoteOperation


class HandlerError(Exception):
    """Raised when a request cannot be served, carrying the local error code."""

    def __init__(self, error_code: HandlerErrorCode, message: str) -> None:
        self.error_code = error_code
        self.message = message
        super().__init__(message)


class CredentialsProviderError(Exception):
    """Raised when there is a credentials provider error."""


@dataclass(frozen=True, slots=True)
class Verdict:
    """Normalized outcome of a remote failure: retry later, or stop with a code."""

    retryable: bool
    error_code: Optional[HandlerErrorCode] = None

    @classmethod
    def retry(cls) -> "Verdict":
        return cls(retryable=True)

    @classmethod
    def terminal(cls, error_code: HandlerErrorCode) -> "Verdict":
        return cls(retryable=False, error_code=error_code)


ERROR_CODE_VERDICTS: Mapping[str, Verdict] = MappingProxyType(
    {
        "AccessDenied": Verdict.terminal(HandlerErrorCode.ACCESS_DENIED),
        "AccessDeniedException": Verdict.terminal(HandlerErrorCode.ACCESS_DENIED),
        "AccessDeniedForDependencyException": Verdict.terminal(
            HandlerErrorCode.ACCESS_DENIED
        ),
        "UnauthorizedOperation": Verdict.terminal(HandlerErrorCode.ACCESS_DENIED),
        "AWSOrganizationsNotInUseException": Verdict.terminal(
            HandlerErrorCode.ACCESS_DENIED
        ),
        "ConstraintViolationException": Verdict.terminal(
            HandlerErrorCode.SERVICE_LIMIT_EXCEEDED
        ),
        "InvalidInputException": Verdict.terminal(HandlerErrorCode.INVALID_REQUEST),
        "ValidationException": Verdict.terminal(HandlerErrorCode.INVALID_REQUEST),
        "DestinationParentNotFoundException": Verdict.terminal(
            HandlerErrorCode.INVALID_REQUEST
        ),
        "SourceParentNotFoundException": Verdict.terminal(
            HandlerErrorCode.INVALID_REQUEST
        ),
        "AccountNotFoundException": Verdict.terminal(
            HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        ),
        "ResourceNotFoundException": Verdict.terminal(
            HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        ),
        "CreateAccountStatusNotFoundException": Verdict.terminal(
            HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        ),
        "DuplicateAccountException": Verdict.terminal(
            HandlerErrorCode.ALREADY_EXISTS
        ),
        "ConcurrentModificationException": Verdict.retry(),
        "TooManyRequestsException": Verdict.retry(),
        "ThrottlingException": Verdict.retry(),
        "ServiceException": Verdict.terminal(
            HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        ),
        "InternalServerException": Verdict.terminal(
            HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
        ),
    }
)

VerdictOverrides = Mapping[RemoteOperation, Mapping[str, Verdict]]

# Create path. A freshly created account can be briefly unknown to the
# account lookups, and a duplicate on MoveAccount usually means the account
# already sits under the destination while ListParents still reports the source.
OPERATION_VERDICT_OVERRIDES: VerdictOverrides = MappingProxyType(
    {
        RemoteOperation.DESCRIBE_ACCOUNT: MappingProxyType(
            {"AccountNotFoundException": Verdict.retry()}
        ),
        RemoteOperation.LIST_PARENTS: MappingProxyType(
            {"AccountNotFoundException": Verdict.retry()}
        ),
        RemoteOperation.MOVE_ACCOUNT: MappingProxyType(
            {
                "AccountNotFoundException": Verdict.retry(),
                "DuplicateAccountException": Verdict.retry(),
            }
        ),
    }
)

# Read path. Reading an account that does not exist is reported as NotFound.
READ_VERDICT_OVERRIDES: VerdictOverrides = MappingProxyType(
    {
        operation: MappingProxyType(
            {
                code: Verdict.terminal(HandlerErrorCode.NOT_FOUND)
                for code in (
                    "AccountNotFoundException",
                    "ResourceNotFoundException",
                )
            }
        )
        for operation in (
            RemoteOperation.DESCRIBE_ACCOUNT,
            RemoteOperation.LIST_PARENTS,
            RemoteOperation.GET_ALTERNATE_CONTACT,
            RemoteOperation.LIST_TAGS_FOR_RESOURCE,
        )
    }
)

CREATE_FAILURE_REASONS: Mapping[str, HandlerErrorCode] = MappingProxyType(
    {
        "EMAIL_ALREADY_EXISTS": HandlerErrorCode.ALREADY_EXISTS,
        "GOVCLOUD_ACCOUNT_ALREADY_EXISTS": HandlerErrorCode.ALREADY_EXISTS,
        "ACCOUNT_LIMIT_EXCEEDED": HandlerErrorCode.SERVICE_LIMIT_EXCEEDED,
        "INVALID_EMAIL": HandlerErrorCode.INVALID_REQUEST,
        "INVALID_ADDRESS": HandlerErrorCode.INVALID_REQUEST,
        "INVALID_IDENTITY_FOR_BUSINESS_VALIDATION": HandlerErrorCode.INVALID_REQUEST,
        "INVALID_PAYMENT_INSTRUMENT": HandlerErrorCode.INVALID_REQUEST,
        "MISSING_BUSINESS_VALIDATION": HandlerErrorCode.INVALID_REQUEST,
        "MISSING_PAYMENT_INSTRUMENT": HandlerErrorCode.INVALID_REQUEST,
        "FAILED_BUSINESS_VALIDATION": HandlerErrorCode.INVALID_REQUEST,
        "UPDATE_EXISTING_RESOURCE_POLICY_WITH_TAGS_NOT_SUPPORTED": HandlerErrorCode.INVALID_REQUEST,
        "INTERNAL_FAILURE": HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
        "CONCURRENT_ACCOUNT_MODIFICATION": HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
        "PENDING_BUSINESS_VALIDATION": HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
        "UNKNOWN_BUSINESS_VALIDATION": HandlerErrorCode.GENERAL_SERVICE_EXCEPTION,
    }
)


def get_error_code(e: Optional[Exception]) -> Optional[str]:
    response = getattr(e, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code")
    return None


def get_error_message(e: Exception) -> str:
    response = getattr(e, "response", None)
    if isinstance(response, dict):
        message = response.get("Error", {}).get("Message")
        if message:
            return message
    return str(e) or e.__class__.__name__


def is_resource_not_found_exception(e: Optional[Exception]) -> bool:
    return get_error_code(e) in (
        "ResourceNotFoundException",
        "ResourceNotFound",
        "AccountNotFoundException",
    )


def classify_client_error(
    e: Exception,
    operation: RemoteOperation,
    overrides: VerdictOverrides = OPERATION_VERDICT_OVERRIDES,
) -> Verdict:
    """
    Map a remote failure to a retry/terminal verdict by its error code.

    Operation specific overrides win over the general table. Anything without
    a known code, including non-botocore exceptions, is a terminal
    GeneralServiceException.
    """
    error_code = get_error_code(e)
    if error_code is None:
        return Verdict.terminal(HandlerErrorCode.GENERAL_SERVICE_EXCEPTION)

    override = overrides.get(operation, {}).get(error_code)
    if override is not None:
        return override

    return ERROR_CODE_VERDICTS.get(
        error_code, Verdict.terminal(HandlerErrorCode.GENERAL_SERVICE_EXCEPTION)
    )


def classify_create_failure(failure_reason: Optional[str]) -> HandlerErrorCode:
    return CREATE_FAILURE_REASONS.get(
        failure_reason or "", HandlerErrorCode.GENERAL_SERVICE_EXCEPTION
    )
