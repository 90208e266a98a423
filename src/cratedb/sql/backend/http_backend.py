from __future__ import annotations

import io
import logging
import urllib.parse
from typing import BinaryIO, Dict, Optional, Tuple

from cratedb.sql.auth.auth import get_auth_provider
from cratedb.sql.auth.authenticators import AuthProvider
from cratedb.sql.auth.common import ClientContext
from cratedb.sql.backend.backend_client import BackendClient
from cratedb.sql.backend.types import BackendOutcome
from cratedb.sql.common.http import HttpHeader, HttpMethod
from cratedb.sql.common.unified_http_client import UnifiedHttpClient
from cratedb.sql.common.url_utils import build_blob_url
from cratedb.sql.exc import TransportError

logger = logging.getLogger(__name__)

_SUPPORTED_SCHEMES = ("http", "https")


def _content_length(content: BinaryIO) -> Optional[int]:
    """Remaining length of a seekable stream, None if it cannot be determined."""
    try:
        if not content.seekable():
            return None
        start = content.tell()
        end = content.seek(0, io.SEEK_END)
        content.seek(start, io.SEEK_SET)
    except (AttributeError, OSError):
        return None
    return end - start


class HttpBackend(BackendClient):
    """
    BackendClient talking to CrateDB nodes over HTTP(S) with urllib3.
    """

    def __init__(
        self,
        client_context: Optional[ClientContext] = None,
        http_client: Optional[UnifiedHttpClient] = None,
        auth_provider: Optional[AuthProvider] = None,
    ):
        """
        Initialize the HTTP backend.

        Args:
            client_context: HTTP configuration; defaults to plain, unauthenticated HTTP
            http_client: Prebuilt HTTP client, mostly for tests
            auth_provider: Overrides the provider derived from client_context
        """
        self._client_context = client_context or ClientContext()
        self._http_client = http_client or UnifiedHttpClient(self._client_context)
        self._auth_provider = auth_provider or get_auth_provider(self._client_context)

    def _get_auth_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        self._auth_provider.add_headers(headers)
        return headers

    def execute(self, url: Optional[str], payload: str) -> str:
        if url is None:
            raise TransportError("No URL specified")
        if urllib.parse.urlsplit(url).scheme not in _SUPPORTED_SCHEMES:
            raise TransportError("Unknown URL scheme")

        headers = {
            **self._get_auth_headers(),
            HttpHeader.CONTENT_TYPE.value: "application/json",
        }
        body = payload.encode("utf-8")

        response = self._http_client.request(
            HttpMethod.POST, url, headers=headers, body=body
        )
        logger.debug("SQL request to %s answered with %s", url, response.status)

        try:
            return response.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransportError.from_io(e) from e

    def upload_blob(
        self,
        url: Optional[str],
        bucket: str,
        digest: bytes,
        content: BinaryIO,
    ) -> BackendOutcome:
        blob_url = build_blob_url(url, bucket, digest)

        headers = self._get_auth_headers()
        length = _content_length(content)
        if length is not None:
            headers[HttpHeader.CONTENT_LENGTH.value] = str(length)

        response = self._http_client.request(
            HttpMethod.PUT, blob_url, headers=headers, body=content
        )
        logger.debug("Blob upload to %s answered with %s", blob_url, response.status)
        return BackendOutcome.from_http_status(response.status)

    def delete_blob(
        self, url: Optional[str], bucket: str, digest: bytes
    ) -> BackendOutcome:
        blob_url = build_blob_url(url, bucket, digest)

        response = self._http_client.request(
            HttpMethod.DELETE, blob_url, headers=self._get_auth_headers()
        )
        logger.debug("Blob delete at %s answered with %s", blob_url, response.status)
        return BackendOutcome.from_http_status(response.status)

    def fetch_blob(
        self, url: Optional[str], bucket: str, digest: bytes
    ) -> Tuple[BackendOutcome, BinaryIO]:
        blob_url = build_blob_url(url, bucket, digest)

        response = self._http_client.open_stream(
            HttpMethod.GET, blob_url, headers=self._get_auth_headers()
        )
        logger.debug("Blob fetch from %s answered with %s", blob_url, response.status)
        return BackendOutcome.from_http_status(response.status), response

    def close(self) -> None:
        self._http_client.close()
