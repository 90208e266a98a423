import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class ClientContext:
    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        access_token: Optional[str] = None,
        # HTTP client configuration parameters
        ssl_options=None,  # SSLOptions type
        socket_timeout: Optional[float] = None,
        proxy_uri: Optional[str] = None,
        proxy_auth_method: Optional[str] = None,
        pool_connections: Optional[int] = None,
        pool_maxsize: Optional[int] = None,
        user_agent: Optional[str] = None,
        http_headers: Optional[List[Tuple[str, str]]] = None,
    ):
        self.username = username
        self.password = password
        self.access_token = access_token

        # HTTP client configuration
        self.ssl_options = ssl_options
        self.socket_timeout = socket_timeout
        self.proxy_uri = proxy_uri
        self.proxy_auth_method = proxy_auth_method
        self.pool_connections = pool_connections or 10
        self.pool_maxsize = pool_maxsize or 20
        self.user_agent = user_agent
        self.http_headers = http_headers or []
