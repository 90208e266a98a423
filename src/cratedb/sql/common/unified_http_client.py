import logging
import ssl
import urllib.parse
import urllib.request
from contextlib import contextmanager
from typing import Dict, Optional, Generator

import urllib3
from urllib3 import BaseHTTPResponse, PoolManager, ProxyManager
from urllib3.exceptions import HTTPError, MaxRetryError

from cratedb.sql.exc import TransportError
from cratedb.sql.common.http import HttpHeader, HttpMethod
from cratedb.sql.common.http_utils import build_proxy_headers, detect_and_parse_proxy

logger = logging.getLogger(__name__)


class UnifiedHttpClient:
    """
    HTTP client for all CrateDB connector HTTP operations.

    This client uses urllib3 for HTTP communication with connection pooling, SSL
    support and proxy support. It never retries: a failed request is reported to
    the caller, who may call again (and thereby pick another node).

    A cluster spans several hosts, so the proxy decision is taken per request from
    the target hostname of each URL, unless an explicit proxy is configured which
    is then used for every request.
    """

    def __init__(self, client_context):
        """
        Initialize the unified HTTP client.

        Args:
            client_context: ClientContext instance containing HTTP configuration
        """
        self.config = client_context
        self._direct_pool_manager = None
        self._proxy_pool_manager = None
        self._proxy_uri = None
        self._proxy_auth = None
        self._explicit_proxy = False
        self._setup_pool_managers()

    def _build_ssl_context(self) -> Optional[ssl.SSLContext]:
        ssl_options = self.config.ssl_options
        if not ssl_options:
            return None

        ssl_context = ssl.create_default_context()

        if not ssl_options.tls_verify:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        elif not ssl_options.tls_verify_hostname:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_REQUIRED

        if ssl_options.tls_trusted_ca_file:
            ssl_context.load_verify_locations(ssl_options.tls_trusted_ca_file)

        if ssl_options.tls_client_cert_file and ssl_options.tls_client_cert_key_file:
            ssl_context.load_cert_chain(
                ssl_options.tls_client_cert_file,
                ssl_options.tls_client_cert_key_file,
                ssl_options.tls_client_cert_key_password,
            )

        return ssl_context

    def _setup_pool_managers(self):
        """Set up both direct and proxy pool managers for per-request proxy decisions."""

        pool_kwargs = {
            "num_pools": self.config.pool_connections,
            "maxsize": self.config.pool_maxsize,
            "retries": False,
            "timeout": urllib3.Timeout(
                connect=self.config.socket_timeout, read=self.config.socket_timeout
            )
            if self.config.socket_timeout
            else None,
            "ssl_context": self._build_ssl_context(),
        }

        self._direct_pool_manager = PoolManager(**pool_kwargs)

        if self.config.proxy_uri:
            self._proxy_uri = self.config.proxy_uri
            self._proxy_auth = build_proxy_headers(
                self._proxy_uri, self.config.proxy_auth_method
            )
            self._explicit_proxy = True
        else:
            # Nodes may use either scheme; plain http is CrateDB's default
            proxy_url, proxy_auth = detect_and_parse_proxy(
                "http",
                None,
                skip_bypass=True,
                proxy_auth_method=self.config.proxy_auth_method,
            )
            if not proxy_url:
                proxy_url, proxy_auth = detect_and_parse_proxy(
                    "https",
                    None,
                    skip_bypass=True,
                    proxy_auth_method=self.config.proxy_auth_method,
                )
            self._proxy_uri = proxy_url
            self._proxy_auth = proxy_auth

        if self._proxy_uri:
            self._proxy_pool_manager = ProxyManager(
                self._proxy_uri, proxy_headers=self._proxy_auth, **pool_kwargs
            )
            logger.debug("Initialized with proxy support: %s", self._proxy_uri)
        else:
            self._proxy_pool_manager = None
            logger.debug("No proxy configured, using direct connections only")

    def _should_use_proxy(self, target_host: str) -> bool:
        """
        Determine if a request to the target host should use proxy.

        Args:
            target_host: The hostname of the target URL

        Returns:
            True if proxy should be used, False for direct connection
        """
        if not self._proxy_pool_manager or not self._proxy_uri:
            return False

        if self._explicit_proxy:
            return True

        try:
            # proxy_bypass returns True if the host should BYPASS the proxy
            return not urllib.request.proxy_bypass(target_host)
        except Exception as e:
            logger.debug("Error checking proxy bypass for host %s: %s", target_host, e)
            return True

    def _get_pool_manager_for_url(self, url: str) -> urllib3.PoolManager:
        """
        Get the appropriate pool manager for the given URL.

        Args:
            url: The target URL

        Returns:
            PoolManager instance (either direct or proxy)
        """
        parsed_url = urllib.parse.urlparse(url)
        target_host = parsed_url.hostname

        if target_host and self._should_use_proxy(target_host):
            logger.debug("Using proxy for request to %s", target_host)
            return self._proxy_pool_manager
        else:
            logger.debug("Using direct connection for request to %s", target_host)
            return self._direct_pool_manager

    def _prepare_headers(
        self, headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """Prepare headers for the request, including User-Agent."""
        request_headers = dict(self.config.http_headers)

        if self.config.user_agent:
            request_headers[HttpHeader.USER_AGENT.value] = self.config.user_agent

        if headers:
            request_headers.update(headers)

        return request_headers

    def _send(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> BaseHTTPResponse:
        logger.debug(
            "Making %s request to %s", method.value, urllib.parse.urlparse(url).netloc
        )

        request_headers = self._prepare_headers(headers)
        pool_manager = self._get_pool_manager_for_url(url)

        try:
            return pool_manager.request(
                method=method.value, url=url, headers=request_headers, **kwargs
            )
        except MaxRetryError as e:
            logger.error("HTTP request failed: %s", e)
            raise TransportError.from_transport(e.reason or e) from e
        except HTTPError as e:
            logger.error("HTTP request error: %s", e)
            raise TransportError.from_transport(e) from e
        except OSError as e:
            logger.error("I/O error while sending request: %s", e)
            raise TransportError.from_io(e) from e

    @contextmanager
    def request_context(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> Generator[BaseHTTPResponse, None, None]:
        """
        Context manager for making HTTP requests with proper resource cleanup.
        The body is not preloaded; read it inside the block.

        Args:
            method: HTTP method (HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE)
            url: URL to request
            headers: Optional headers dict
            **kwargs: Additional arguments passed to urllib3 request

        Yields:
            BaseHTTPResponse: The HTTP response object

        Raises:
            TransportError: if the request could not be sent or answered
        """
        response = self._send(
            method, url, headers=headers, preload_content=False, **kwargs
        )
        try:
            yield response
        finally:
            response.close()

    def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> BaseHTTPResponse:
        """
        Make an HTTP request.

        Returns:
            BaseHTTPResponse: The HTTP response object with data and metadata pre-loaded
        """
        with self.request_context(method, url, headers=headers, **kwargs) as response:
            # status and headers remain accessible after close(); data is cached
            try:
                response.read(cache_content=True)
            except (HTTPError, OSError) as e:
                logger.error("Failed to read response body: %s", e)
                raise TransportError.from_io(e) from e
            return response

    def open_stream(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> BaseHTTPResponse:
        """
        Make an HTTP request without reading the body.

        The returned response is a readable file-like object. The caller owns it and
        must close it once the body has been consumed.
        """
        return self._send(
            method, url, headers=headers, preload_content=False, **kwargs
        )

    def using_proxy(self) -> bool:
        """Check if proxy support is available (not whether it's being used for a specific request)."""
        return self._proxy_pool_manager is not None

    def close(self):
        """Close the underlying connection pools."""
        if self._direct_pool_manager:
            self._direct_pool_manager.clear()
            self._direct_pool_manager = None
        if self._proxy_pool_manager:
            self._proxy_pool_manager.clear()
            self._proxy_pool_manager = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
