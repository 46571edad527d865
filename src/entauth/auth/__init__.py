"""Browser-redirect login for the enterprise service.

The main entry points are:

- :class:`LoginOrchestrator` -- reuse a cached token or run the browser flow.
- :class:`TokenStore` -- the single locally persisted token.
- :class:`Verifier` -- asks the service whether a token is still valid.
- :class:`RedirectServer` -- local listener for the browser redirect.

Typical usage::

    from entauth.auth import LoginOrchestrator
    from entauth.config import load_settings

    token = LoginOrchestrator(load_settings()).login("https://app.example.com")
"""

from entauth.auth.login import LoginOrchestrator
from entauth.auth.redirect_server import RedirectServer, ServerState
from entauth.auth.token_store import TokenStore
from entauth.auth.verifier import Verifier

__all__ = [
    "LoginOrchestrator",
    "RedirectServer",
    "ServerState",
    "TokenStore",
    "Verifier",
]
