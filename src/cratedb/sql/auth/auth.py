from cratedb.sql.auth.authenticators import (
    AuthProvider,
    AccessTokenAuthProvider,
    BasicAuthProvider,
)
from cratedb.sql.auth.common import ClientContext


def get_auth_provider(cfg: ClientContext) -> AuthProvider:
    if cfg.access_token is not None:
        return AccessTokenAuthProvider(cfg.access_token)
    elif cfg.username is not None:
        return BasicAuthProvider(cfg.username, cfg.password or "")
    else:
        # no op authenticator. CrateDB trusts the connecting host or a client certificate
        return AuthProvider()
