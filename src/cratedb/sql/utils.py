from __future__ import annotations

import datetime
import decimal
import json
import logging
import uuid
from typing import Any

from cratedb.sql.auth.common import ClientContext
from cratedb.sql.exc import ProgrammingError
from cratedb.sql.types import SSLOptions

logger = logging.getLogger(__name__)

USER_AGENT_PRODUCT = "PyCrateDBSqlConnector"


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps_payload(payload: Any) -> str:
    """
    Serialize a request body.

    Parameter values beyond plain JSON types are rendered the way CrateDB accepts
    them: dates and timestamps as ISO-8601 strings, Decimal and UUID as strings.

    Raises:
        ProgrammingError: if a parameter value cannot be serialized
    """
    try:
        return json.dumps(payload, default=_json_default)
    except (TypeError, ValueError) as e:
        raise ProgrammingError(f"Could not serialize query parameters: {e}") from e


def build_client_context(version: str, **kwargs) -> ClientContext:
    """Build ClientContext for the HTTP backend with SSL, proxy and auth configuration."""

    # TLS verification is on unless _tls_no_verify is set
    ssl_options = SSLOptions(
        tls_verify=not kwargs.get("_tls_no_verify", False),
        tls_verify_hostname=kwargs.get("_tls_verify_hostname", True),
        tls_trusted_ca_file=kwargs.get("_tls_trusted_ca_file"),
        tls_client_cert_file=kwargs.get("_tls_client_cert_file"),
        tls_client_cert_key_file=kwargs.get("_tls_client_cert_key_file"),
        tls_client_cert_key_password=kwargs.get("_tls_client_cert_key_password"),
    )

    user_agent = f"{USER_AGENT_PRODUCT}/{version}"
    if kwargs.get("user_agent_entry"):
        user_agent = f"{user_agent} ({kwargs['user_agent_entry']})"

    return ClientContext(
        username=kwargs.get("username"),
        password=kwargs.get("password"),
        access_token=kwargs.get("access_token"),
        ssl_options=ssl_options,
        socket_timeout=kwargs.get("_socket_timeout"),
        proxy_uri=kwargs.get("proxy"),
        proxy_auth_method=kwargs.get("_proxy_auth_method"),
        pool_connections=kwargs.get("_pool_connections"),
        pool_maxsize=kwargs.get("_pool_maxsize"),
        user_agent=user_agent,
        http_headers=kwargs.get("http_headers"),
    )
