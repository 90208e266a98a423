from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Tuple

from cratedb.sql.backend.types import BackendOutcome


class BackendClient(ABC):
    """
    Abstract transport interface used by the SQL and blob protocol layers.

    Implementations of this class are responsible for:
    - Sending a JSON SQL request to an SQL endpoint and returning the response text
    - Uploading, fetching and deleting blobs addressed by (endpoint, bucket, digest)
    - Classifying blob responses as a BackendOutcome

    Every method receives the endpoint URL chosen by the cluster's endpoint
    selector; None means no endpoint was available. Failures below the protocol
    layer are raised as TransportError. Implementations must be safe to call
    from several threads at once.
    """

    @abstractmethod
    def execute(self, url: Optional[str], payload: str) -> str:
        """
        POST a JSON payload to an SQL endpoint.

        Args:
            url: The SQL endpoint URL, e.g. "http://localhost:4200/_sql"
            payload: The serialized JSON request body

        Returns:
            The response body as text, whatever the HTTP status was

        Raises:
            TransportError: CUSTOM if url is None, TRANSPORT on network failure,
                IO if the response body cannot be read
        """
        pass

    @abstractmethod
    def upload_blob(
        self,
        url: Optional[str],
        bucket: str,
        digest: bytes,
        content: BinaryIO,
    ) -> BackendOutcome:
        """
        PUT `content` to `{url}/{bucket}/{hex(digest)}`.

        Args:
            url: The blob endpoint URL, e.g. "http://localhost:4200/_blobs"
            bucket: The blob table
            digest: The SHA-1 digest of `content`
            content: Readable stream positioned at the start of the content

        Returns:
            BackendOutcome: The classified response status

        Raises:
            TransportError: for a missing or invalid URL, or connection errors
        """
        pass

    @abstractmethod
    def delete_blob(
        self, url: Optional[str], bucket: str, digest: bytes
    ) -> BackendOutcome:
        """
        DELETE `{url}/{bucket}/{hex(digest)}`.

        Raises:
            TransportError: for a missing or invalid URL, or connection errors
        """
        pass

    @abstractmethod
    def fetch_blob(
        self, url: Optional[str], bucket: str, digest: bytes
    ) -> Tuple[BackendOutcome, BinaryIO]:
        """
        GET `{url}/{bucket}/{hex(digest)}`.

        Returns:
            The classified status and the response body as a stream. The stream is
            not buffered; it stays readable until the caller consumes or closes it.

        Raises:
            TransportError: for a missing or invalid URL, or connection errors
        """
        pass

    def close(self) -> None:
        """Release transport resources. The default implementation holds none."""
        pass
