import hashlib
import io
import json
from typing import Dict, List, Optional, Tuple

import pytest

from cratedb.sql.backend.backend_client import BackendClient
from cratedb.sql.backend.types import BackendOutcome
from cratedb.sql.common.url_utils import build_blob_url
from cratedb.sql.exc import TransportError


class FakeBackend(BackendClient):
    """
    In-memory BackendClient.

    SQL responses are served from `responses` (a list of bodies popped in order, or a
    single body reused for every call); blobs are stored in a dict keyed by the blob
    URL path so the URL construction rules are exercised too.
    """

    def __init__(self, responses=None):
        self.responses = responses if responses is not None else []
        self.blobs: Dict[Tuple[str, bytes], bytes] = {}
        self.executed: List[Tuple[Optional[str], str]] = []
        self.blob_calls: List[Tuple[str, Optional[str], str]] = []
        self.outcome: Optional[BackendOutcome] = None
        self.transport_error: Optional[TransportError] = None
        self.closed = False

    def _next_body(self) -> str:
        if isinstance(self.responses, str):
            return self.responses
        return self.responses.pop(0)

    def execute(self, url, payload):
        self.executed.append((url, payload))
        if self.transport_error:
            raise self.transport_error
        if url is None:
            raise TransportError("No URL specified")
        return self._next_body()

    @property
    def last_payload(self):
        return json.loads(self.executed[-1][1])

    def _check(self, kind, url, bucket, digest):
        blob_url = build_blob_url(url, bucket, digest)
        self.blob_calls.append((kind, url, blob_url))
        if self.transport_error:
            raise self.transport_error

    def upload_blob(self, url, bucket, digest, content):
        self._check("upload", url, bucket, digest)
        if self.outcome is not None:
            return self.outcome
        data = content.read()
        assert hashlib.sha1(data).digest() == digest
        self.blobs[(bucket, digest)] = data
        return BackendOutcome.OK

    def delete_blob(self, url, bucket, digest):
        self._check("delete", url, bucket, digest)
        if self.outcome is not None:
            return self.outcome
        if self.blobs.pop((bucket, digest), None) is None:
            return BackendOutcome.NOT_FOUND
        return BackendOutcome.OK

    def fetch_blob(self, url, bucket, digest):
        self._check("fetch", url, bucket, digest)
        if self.outcome is not None:
            return self.outcome, io.BytesIO(b"")
        if (bucket, digest) not in self.blobs:
            return BackendOutcome.NOT_FOUND, io.BytesIO(b"")
        return BackendOutcome.OK, io.BytesIO(self.blobs[(bucket, digest)])

    def close(self):
        self.closed = True


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def nodes():
    return ("http://node1:4200/", "http://node2:4200/")
