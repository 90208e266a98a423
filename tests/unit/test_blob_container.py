import hashlib
import io
import json
from unittest.mock import Mock

import pytest

from cratedb.sql.backend.loadbalancing import RoundRobinEndpointSelector
from cratedb.sql.backend.types import BackendOutcome
from cratedb.sql.blob.blob_container import BlobContainer, outcome_error
from cratedb.sql.exc import (
    BlobActionError,
    BlobError,
    BlobTransportError,
    ServerError,
    TransportError,
    TransportErrorKind,
)
from cratedb.sql.query_runner import QueryRunner
from cratedb.sql.types import BlobRef

CONTENT = b"Hello, blob!" * 100
DIGEST = hashlib.sha1(CONTENT).digest()


def digest_listing(digests):
    return json.dumps(
        {
            "cols": ["digest"],
            "rows": [[d] for d in digests],
            "rowcount": len(digests),
            "duration": 0.5,
        }
    )


class TestBlobContainer:
    @pytest.fixture
    def container(self, nodes, fake_backend):
        selector = RoundRobinEndpointSelector()
        runner = QueryRunner(nodes, fake_backend, selector)
        return BlobContainer(nodes, fake_backend, selector, runner)

    def test_put_returns_content_digest(self, container, fake_backend):
        blob_ref = container.put("my_blobs", io.BytesIO(CONTENT))

        assert blob_ref == BlobRef(digest=DIGEST, bucket="my_blobs")
        assert fake_backend.blobs[("my_blobs", DIGEST)] == CONTENT

    def test_put_uploads_from_start_of_stream(self, container, fake_backend):
        source = io.BytesIO(CONTENT)
        source.seek(50)

        container.put("b", source)

        assert fake_backend.blobs[("b", DIGEST)] == CONTENT

    def test_put_targets_blob_endpoint(self, container, fake_backend, nodes):
        container.put("b", io.BytesIO(CONTENT))

        kind, url, blob_url = fake_backend.blob_calls[0]
        assert kind == "upload"
        assert url == f"{nodes[0]}_blobs"
        assert blob_url == f"{nodes[0]}_blobs/b/{DIGEST.hex()}"

    def test_put_is_idempotent(self, container):
        first = container.put("b", io.BytesIO(CONTENT))
        second = container.put("b", io.BytesIO(CONTENT))
        assert first == second

    def test_round_trip(self, container):
        blob_ref = container.put("b", io.BytesIO(CONTENT))

        stream = container.get(blob_ref)

        assert stream.read() == CONTENT
        assert hashlib.sha1(CONTENT).digest() == blob_ref.digest

    def test_get_after_delete_is_not_found(self, container):
        blob_ref = container.put("b", io.BytesIO(CONTENT))
        container.delete(blob_ref)

        with pytest.raises(BlobActionError) as exc_info:
            container.get(blob_ref)

        assert exc_info.value.error == ServerError(
            "Could not fetch BLOB. Not found.", "404"
        )

    def test_delete_missing_blob(self, container):
        with pytest.raises(BlobActionError) as exc_info:
            container.delete(BlobRef(digest=DIGEST, bucket="b"))

        assert exc_info.value.error.code == "404"
        assert exc_info.value.error.message == "Could not delete BLOB. Not found."

    @pytest.mark.parametrize("outcome,message,code", [
        (BackendOutcome.NOT_AUTHORIZED, "Could not upload BLOB: Not authorized.", "403"),
        (BackendOutcome.TIMEOUT, "Could not upload BLOB. Timed out.", "408"),
        (BackendOutcome.ERROR, "Could not upload BLOB. Server error.", "500"),
        (BackendOutcome.NOT_FOUND, "Could not upload BLOB. Not found.", "404"),
    ])
    def test_put_outcomes(self, container, fake_backend, outcome, message, code):
        fake_backend.outcome = outcome

        with pytest.raises(BlobActionError) as exc_info:
            container.put("b", io.BytesIO(CONTENT))

        assert exc_info.value.error == ServerError(message, code)
        assert str(exc_info.value) == f"Error [Code {code}]: {message}"

    def test_get_closes_stream_on_failure(self, container, fake_backend):
        content = Mock()
        fake_backend.fetch_blob = Mock(return_value=(BackendOutcome.TIMEOUT, content))

        with pytest.raises(BlobActionError) as exc_info:
            container.get(BlobRef(digest=DIGEST, bucket="b"))

        content.close.assert_called_once()
        assert exc_info.value.error.message == "Could not fetch BLOB. Timed out."

    @pytest.mark.parametrize("operation", ["put", "get", "delete"])
    def test_transport_failures(self, container, fake_backend, operation):
        error = TransportError.from_transport(ConnectionResetError("reset"))
        fake_backend.transport_error = error

        with pytest.raises(BlobTransportError) as exc_info:
            if operation == "put":
                container.put("b", io.BytesIO(CONTENT))
            elif operation == "get":
                container.get(BlobRef(digest=DIGEST, bucket="b"))
            else:
                container.delete(BlobRef(digest=DIGEST, bucket="b"))

        assert exc_info.value.error is error
        assert isinstance(exc_info.value, BlobError)

    def test_unreadable_source(self, container, fake_backend):
        source = Mock()
        source.seek.side_effect = OSError("not seekable")

        with pytest.raises(BlobTransportError) as exc_info:
            container.put("b", source)

        assert exc_info.value.error.kind is TransportErrorKind.IO
        assert fake_backend.blob_calls == []

    def test_closed_source(self, container, fake_backend):
        source = io.BytesIO(CONTENT)
        source.close()

        with pytest.raises(BlobTransportError) as exc_info:
            container.put("b", source)

        assert exc_info.value.error.kind is TransportErrorKind.IO
        assert isinstance(exc_info.value.error.original_exception, ValueError)
        assert fake_backend.blob_calls == []

    def test_list(self, container, fake_backend):
        digests = [hashlib.sha1(bytes([i])).hexdigest() for i in range(3)]
        fake_backend.responses = [digest_listing(digests)]

        blob_refs = container.list("my_blobs")

        assert [r.hex_digest for r in blob_refs] == digests
        assert all(r.bucket == "my_blobs" for r in blob_refs)
        assert fake_backend.last_payload == {"stmt": "select digest from blob.my_blobs"}

    def test_list_skips_invalid_digests(self, container, fake_backend):
        valid = [hashlib.sha1(bytes([i])).hexdigest() for i in range(4)]
        invalid = ["not hex", "abc", None, 42]
        fake_backend.responses = [digest_listing(valid + invalid)]

        blob_refs = container.list("b")

        assert len(blob_refs) == len(valid)

    def test_list_of_empty_bucket(self, container, fake_backend):
        fake_backend.responses = [digest_listing([])]
        assert container.list("b") == []

    def test_list_server_error(self, container, fake_backend):
        fake_backend.responses = [
            json.dumps(
                {"error": {"message": "RelationUnknown[blob.nope]", "code": 4041}}
            )
        ]

        with pytest.raises(BlobActionError) as exc_info:
            container.list("nope")

        assert exc_info.value.error == ServerError("RelationUnknown[blob.nope]", "4041")

    def test_list_transport_error(self, container, fake_backend):
        fake_backend.transport_error = TransportError.from_io(OSError("broken pipe"))

        with pytest.raises(BlobTransportError):
            container.list("b")


class TestOutcomeError:
    def test_ok_is_not_an_error(self):
        with pytest.raises(KeyError):
            outcome_error("upload", BackendOutcome.OK)

    def test_wraps_server_error(self):
        error = outcome_error("delete", BackendOutcome.NOT_AUTHORIZED)
        assert isinstance(error, BlobActionError)
        assert error.error.code == "403"
        assert error.error.message == "Could not delete BLOB: Not authorized."
