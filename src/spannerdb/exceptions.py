"""
Spanner adapter exception classes.
"""
import re

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions

RETRYABLE_PATTERNS = [
    # gRPC status names
    r'unavailable',
    r'deadline exceeded',
    r'aborted',
    r'resource exhausted',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'broken pipe',
    r'socket closed',
    # Timeouts
    r'timeout',
    r'timed out',
    # Network issues
    r'could not connect',
    r'no route to host',
    r'network.*(unreachable|error)',
]

_RETRYABLE_REGEX = re.compile('|'.join(RETRYABLE_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient error worth retrying.

    Nothing in this package retries. The classifier is offered to callers
    that layer their own retry policy around an operation.

    Returns True for errors that are likely transient:
    - Service unavailable / aborted transactions
    - Deadline exceeded
    - Connection drops and network issues

    Returns False for errors that will fail again:
    - Unknown native types
    - Missing tables
    - Unsupported operations
    - Permission errors

    :param exc: The exception to check.
    :returns: True if the error is likely transient and worth retrying.
    """
    if isinstance(exc, (MappingError, SchemaNotFound, UnsupportedOperation,
                        NotImplementedOperation, ConfigurationError)):
        return False
    if isinstance(exc, (api_exceptions.ServiceUnavailable,
                        api_exceptions.DeadlineExceeded,
                        api_exceptions.Aborted)):
        return True
    error_msg = str(exc).lower()
    return bool(_RETRYABLE_REGEX.search(error_msg))


class DatabaseError(Exception):
    """Base class for all spannerdb errors.
    """


class ConnectionFailure(DatabaseError):
    """Error opening, using or closing the Spanner session.
    """


class QueryError(DatabaseError):
    """Error executing a query or streaming its results.
    """


class OperationCancelled(QueryError):
    """The call context was cancelled while an operation was running.
    """


class DeadlineExceeded(OperationCancelled):
    """The call context deadline passed while an operation was running.
    """


class TypeConversionError(DatabaseError):
    """Error converting values between Spanner and Python.
    """


class MappingError(TypeConversionError):
    """Native Spanner type with no canonical column type.
    """

    def __init__(self, native_type: str) -> None:
        super().__init__(f'cannot convert spanner type: {native_type}')
        self.native_type = native_type


class SchemaNotFound(DatabaseError):
    """Requested table is absent from the discovered catalog.
    """

    def __init__(self, table: str) -> None:
        super().__init__(f'Schema not found: {table}')
        self.table = table


class UnsupportedOperation(DatabaseError):
    """Operation this adapter refuses permanently.
    """


class NotImplementedOperation(DatabaseError):
    """Operation with no implementation for the given input.
    """


class ConfigurationError(DatabaseError):
    """Error in driver registration or options.
    """


DbConnectionError = (
    api_exceptions.ServiceUnavailable,
    api_exceptions.Unauthenticated,
    api_exceptions.PermissionDenied,
    auth_exceptions.DefaultCredentialsError,
    auth_exceptions.TransportError,
    ConnectionFailure,
    )

ProgrammingError = (
    api_exceptions.InvalidArgument,
    api_exceptions.NotFound,
    api_exceptions.FailedPrecondition,
    QueryError,
    )

# Everything a session may raise while executing or streaming a query
SessionError = (
    api_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    )
