from __future__ import annotations

import logging
from typing import BinaryIO, List, Sequence

from cratedb.sql.backend.backend_client import BackendClient
from cratedb.sql.backend.loadbalancing import EndpointSelector
from cratedb.sql.backend.types import BackendOutcome, EndpointType
from cratedb.sql.blob.digest import from_hex_string, sha1_digest
from cratedb.sql.exc import (
    BlobActionError,
    BlobTransportError,
    ServerError,
    TransportError,
)
from cratedb.sql.query_runner import QueryRunner
from cratedb.sql.types import BlobRef

logger = logging.getLogger(__name__)

# outcome -> (message template, status code)
_OUTCOME_ERRORS = {
    BackendOutcome.NOT_FOUND: ("Could not {} BLOB. Not found.", "404"),
    BackendOutcome.NOT_AUTHORIZED: ("Could not {} BLOB: Not authorized.", "403"),
    BackendOutcome.TIMEOUT: ("Could not {} BLOB. Timed out.", "408"),
    BackendOutcome.ERROR: ("Could not {} BLOB. Server error.", "500"),
}

LIST_QUERY_TEMPLATE = "select digest from blob.{}"


def outcome_error(action: str, outcome: BackendOutcome) -> BlobActionError:
    """The BlobActionError for a failed `action` ("upload", "delete", "fetch")."""
    message, code = _OUTCOME_ERRORS[outcome]
    return BlobActionError(ServerError(message.format(action), code))


class BlobContainer:
    """
    Content-addressed blob storage on top of CrateDB blob tables.

    Blobs are named by the SHA-1 digest of their content; uploading the same bytes
    to the same bucket twice addresses the same blob. Nothing is deduplicated on
    the client: every put is sent and the server decides.
    """

    def __init__(
        self,
        nodes: Sequence[str],
        backend: BackendClient,
        endpoint_selector: EndpointSelector,
        query_runner: QueryRunner,
    ):
        self.nodes = nodes
        self.backend = backend
        self.endpoint_selector = endpoint_selector
        self.query_runner = query_runner

    def _blob_endpoint(self):
        return self.endpoint_selector.select(self.nodes, EndpointType.BLOB)

    def put(self, bucket: str, source: BinaryIO) -> BlobRef:
        """
        Uploads the content of a readable, seekable stream into `bucket`.

        The digest is computed over the whole stream first; the stream is then
        rewound and uploaded from its start.

        Raises:
            BlobActionError: if the server did not accept the upload
            BlobTransportError: if the stream could not be read or the request failed
        """
        try:
            digest = sha1_digest(source)
        except (OSError, ValueError) as e:
            raise BlobTransportError(TransportError.from_io(e)) from e

        try:
            outcome = self.backend.upload_blob(
                self._blob_endpoint(), bucket, digest, source
            )
        except TransportError as e:
            raise BlobTransportError(e) from e

        if outcome is not BackendOutcome.OK:
            raise outcome_error("upload", outcome)

        blob_ref = BlobRef(digest=digest, bucket=bucket)
        logger.debug("Uploaded %s", blob_ref)
        return blob_ref

    def delete(self, blob_ref: BlobRef) -> None:
        """
        Deletes a blob.

        Raises:
            BlobActionError: if the server did not delete the blob
            BlobTransportError: if the request failed
        """
        try:
            outcome = self.backend.delete_blob(
                self._blob_endpoint(), blob_ref.bucket, blob_ref.digest
            )
        except TransportError as e:
            raise BlobTransportError(e) from e

        if outcome is not BackendOutcome.OK:
            raise outcome_error("delete", outcome)

    def get(self, blob_ref: BlobRef) -> BinaryIO:
        """
        Fetches a blob. Returns its content as a stream which the caller reads and
        closes; large blobs are never buffered in memory.

        Raises:
            BlobActionError: if the server did not return the blob
            BlobTransportError: if the request failed
        """
        try:
            outcome, content = self.backend.fetch_blob(
                self._blob_endpoint(), blob_ref.bucket, blob_ref.digest
            )
        except TransportError as e:
            raise BlobTransportError(e) from e

        if outcome is not BackendOutcome.OK:
            content.close()
            raise outcome_error("fetch", outcome)

        return content

    def list(self, bucket: str) -> List[BlobRef]:
        """
        Lists the blobs of `bucket` by querying the blob table's digest column.
        Rows whose digest is not valid hex are skipped.

        Raises:
            BlobActionError: if the catalog query failed on the server
            BlobTransportError: if the request failed
        """
        try:
            _, rows = self.query_runner.query(LIST_QUERY_TEMPLATE.format(bucket))
        except ServerError as e:
            raise BlobActionError(e) from e
        except TransportError as e:
            raise BlobTransportError(e) from e

        blob_refs = []
        for row in rows:
            digest_str = row.as_string("digest")
            if digest_str is None:
                logger.debug("Skipping blob listing row without digest: %r", row)
                continue
            try:
                digest = from_hex_string(digest_str)
            except ValueError:
                logger.debug("Skipping invalid digest %r in blob.%s", digest_str, bucket)
                continue
            blob_refs.append(BlobRef(digest=digest, bucket=bucket))
        return blob_refs
