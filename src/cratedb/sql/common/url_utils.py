"""
URL utility functions for the CrateDB SQL connector.
"""

import urllib.parse
from typing import Optional

from cratedb.sql.blob.digest import to_hex_string
from cratedb.sql.exc import ConfigurationError, TransportError


def normalize_node_url(node: str) -> str:
    """
    Normalize a cluster node URL by ensuring it has a protocol and exactly one trailing slash.

    Endpoint paths are appended directly to the node URL ("_sql", "_blobs"), so the
    trailing slash is part of the normalized form.

    Args:
        node: Node address which may or may not include a protocol prefix (https:// or http://)
              and may or may not have a trailing slash

    Returns:
        Normalized node URL with a lowercase protocol prefix and a single trailing slash

    Raises:
        ValueError: if `node` is None or blank
        ConfigurationError: if `node` has a scheme other than http or https

    Examples:
        normalize_node_url("localhost:4200") -> "http://localhost:4200/"
        normalize_node_url("https://crate.example.com/") -> "https://crate.example.com/"
    """
    if node is None or not node.strip():
        raise ValueError("Host cannot be None or empty")

    node = node.strip().rstrip("/")

    scheme, sep, remainder = node.partition("://")
    if not sep:
        node = f"http://{node}"
    elif scheme.lower() in ("http", "https"):
        node = f"{scheme.lower()}://{remainder}"
    else:
        raise ConfigurationError(f"Unsupported URL scheme for node {node}: {scheme}")

    return node + "/"


def build_blob_url(url: Optional[str], bucket: str, digest: bytes) -> str:
    """
    Build the URL of a single blob: `{url}/{bucket}/{hex(digest)}`.

    Bucket and hex digest are appended as escaped path segments to the path of `url`;
    query and fragment of `url` are dropped.

    Raises:
        TransportError: "No URL specified" if `url` is None, "Invalid blob url" if
            `url` cannot be parsed into scheme and host
    """
    if url is None:
        raise TransportError("No URL specified")

    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError as e:
        raise TransportError("Invalid blob url", original_exception=e) from e
    if not parts.scheme or not parts.netloc:
        raise TransportError("Invalid blob url")

    path = "/".join(
        [
            parts.path.rstrip("/"),
            urllib.parse.quote(bucket, safe=""),
            urllib.parse.quote(to_hex_string(digest), safe=""),
        ]
    )
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, path, "", ""))
