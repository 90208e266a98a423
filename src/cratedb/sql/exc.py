import json
import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

### PEP-249 Mandated ###
# https://peps.python.org/pep-0249/#exceptions
class Error(Exception):
    """Base class for DB-API2.0 exceptions.
    `message`: An optional user-friendly error message. It should be short, actionable and stable
    `context`: Optional extra context about the error. MUST be JSON serializable
    """

    def __init__(self, message=None, context=None, *args, **kwargs):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.context = context or {}

    def __str__(self):
        return self.message

    def message_with_context(self):
        return self.message + ": " + json.dumps(self.context, default=str)


class Warning(Exception):
    pass


class InterfaceError(Error):
    pass


class DatabaseError(Error):
    pass


class InternalError(DatabaseError):
    pass


class OperationalError(DatabaseError):
    pass


class ProgrammingError(DatabaseError):
    pass


class DataError(DatabaseError):
    pass


class NotSupportedError(DatabaseError):
    pass


### Custom error classes ###
class ConfigurationError(InterfaceError):
    """Thrown if a cluster is constructed without any node to talk to."""

    pass


class ServerError(DatabaseError):
    """Thrown if the SQL endpoint reported a structured error, or returned a body
    that could not be decoded.
    `code` is always a string, e.g. "4045" for a missing table or "500" for an
    undecodable response.
    """

    def __init__(self, message: str, code, context=None):
        self.code = str(code)
        self.description = f"Error [Code {self.code}]: {message}"
        super().__init__(message, context)

    def __str__(self):
        return self.description

    def __repr__(self):
        return f"ServerError(message={self.message!r}, code={self.code!r})"

    def __eq__(self, other):
        if not isinstance(other, ServerError):
            return NotImplemented
        return (self.message, self.code) == (other.message, other.code)

    def __hash__(self):
        return hash((self.message, self.code))


class TransportErrorKind(Enum):
    """Where below the protocol layer a request failed."""

    TRANSPORT = "transport"
    IO = "io"
    CUSTOM = "custom"


class TransportError(OperationalError):
    """Thrown if a request could not be carried out by the transport.
    Its context will have the following keys:
    "kind": The TransportErrorKind value
    "original-exception": The Python level original exception (if any)
    """

    def __init__(
        self,
        message: str,
        kind: TransportErrorKind = TransportErrorKind.CUSTOM,
        original_exception: Optional[BaseException] = None,
    ):
        context = {"kind": kind.value}
        if original_exception is not None:
            context["original-exception"] = original_exception
        super().__init__(message, context)
        self.kind = kind
        self.original_exception = original_exception

    @classmethod
    def from_transport(cls, error: BaseException) -> "TransportError":
        return cls(f"Error on Transport: {error}", TransportErrorKind.TRANSPORT, error)

    @classmethod
    def from_io(cls, error: BaseException) -> "TransportError":
        return cls(f"Error on I/O: {error}", TransportErrorKind.IO, error)

    @classmethod
    def from_parser(cls, error: BaseException) -> "TransportError":
        return cls(f"Error on Parse: {error}", TransportErrorKind.CUSTOM, error)

    def __eq__(self, other):
        if not isinstance(other, TransportError):
            return NotImplemented
        return (self.kind, self.message) == (other.kind, other.message)

    def __hash__(self):
        return hash((self.kind, self.message))


class BlobError(DatabaseError):
    """Base class of the two ways a blob operation can fail. Only
    BlobActionError and BlobTransportError are ever raised."""

    def __init__(self, error: Error):
        super().__init__(str(error), {"cause": error.__class__.__name__})
        self.error = error


class BlobActionError(BlobError):
    """The blob endpoint (or the catalog query behind `list`) answered, but
    not with success. `error` is the ServerError describing the outcome."""

    error: ServerError


class BlobTransportError(BlobError):
    """The blob request never produced an answer. `error` is the TransportError."""

    error: TransportError
