import base64
from typing import Dict

from cratedb.sql.common.http import HttpHeader


class AuthProvider:
    def add_headers(self, request_headers: Dict[str, str]):
        pass


class BasicAuthProvider(AuthProvider):
    """HTTP basic auth for CrateDB database users. The password may be empty."""

    def __init__(self, username: str, password: str = ""):
        credentials = "{}:{}".format(username, password or "").encode("utf-8")
        self.__authorization_header_value = "Basic {}".format(
            base64.b64encode(credentials).decode("ascii")
        )

    def add_headers(self, request_headers: Dict[str, str]):
        request_headers[HttpHeader.AUTHORIZATION.value] = self.__authorization_header_value


class AccessTokenAuthProvider(AuthProvider):
    def __init__(self, access_token: str):
        self.__authorization_header_value = "Bearer {}".format(access_token)

    def add_headers(self, request_headers: Dict[str, str]):
        request_headers[HttpHeader.AUTHORIZATION.value] = self.__authorization_header_value
