from enum import Enum
import logging

logger = logging.getLogger(__name__)


class BackendOutcome(Enum):
    """
    Normalized classification of a transport-level response.

    Decouples the blob protocol from any particular transport's status code
    vocabulary.

    Attributes:
        OK: The request succeeded
        NOT_FOUND: The addressed resource does not exist
        NOT_AUTHORIZED: The request was refused
        TIMEOUT: The server reported a request timeout
        ERROR: Any other failure
    """

    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    TIMEOUT = "TIMEOUT"
    ERROR = "ERROR"

    @classmethod
    def from_http_status(cls, status: int) -> "BackendOutcome":
        """
        Convert an HTTP status code to a BackendOutcome.

        Status Mappings:
            - 200, 201, 202 -> OK
            - 400, 500 -> ERROR
            - 401, 403, 405 -> NOT_AUTHORIZED
            - 408 -> TIMEOUT
            - anything else -> ERROR
        """
        if status in (200, 201, 202):
            return cls.OK
        elif status in (400, 500):
            return cls.ERROR
        elif status in (401, 403, 405):
            return cls.NOT_AUTHORIZED
        elif status == 408:
            return cls.TIMEOUT
        else:
            return cls.ERROR


class EndpointType(Enum):
    """
    Enum representing the kind of endpoint a request goes to. The value is the
    path suffix appended to a node's base URL.
    """

    SQL = "_sql"
    BLOB = "_blobs"

    @property
    def path_suffix(self) -> str:
        return self.value
