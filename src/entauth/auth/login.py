"""Login orchestration -- reuse a cached token or run the browser flow.

:class:`LoginOrchestrator` ties the auth pieces together:

1. Read the current token from the :class:`~entauth.auth.token_store.TokenStore`
   and, if there is one, ask the :class:`~entauth.auth.verifier.Verifier`
   whether it is still valid.  A valid token ends the login right there.
2. Otherwise start a :class:`~entauth.auth.redirect_server.RedirectServer`,
   which opens the enterprise login page in the browser.
3. Wait for the redirect to deliver a token (bounded by
   :attr:`~entauth.models.AuthSettings.login_timeout`).
4. Close the listener whatever step 3 produced.
5. Fail with :class:`~entauth.exceptions.NoTokenReceivedError` if the
   redirect carried no token.
6. Persist the token (failures only degrade caching) and return it.
"""

from __future__ import annotations

import concurrent.futures
import webbrowser
from collections.abc import Callable
from typing import Any, Optional

from entauth.auth.redirect_server import RedirectServer
from entauth.auth.token_store import TokenStore
from entauth.auth.verifier import Verifier
from entauth.exceptions import NoTokenReceivedError
from entauth.models import AuthSettings
from entauth.output import debug, info


class LoginOrchestrator:
    """Log in to an enterprise domain and return a valid client auth token.

    Args:
        settings: Process-wide auth settings.
        store: Token store.  Built from *settings* when omitted.
        verifier: Token verifier.  Built from *settings* when omitted.
        open_browser: Browser-launch collaborator handed to the redirect server.
        server_factory: Callable building the redirect server; receives the
            same keyword arguments as :class:`RedirectServer`.
    """

    def __init__(
        self,
        settings: AuthSettings,
        store: Optional[TokenStore] = None,
        verifier: Optional[Verifier] = None,
        open_browser: Callable[[str], Any] = webbrowser.open,
        server_factory: Callable[..., RedirectServer] = RedirectServer,
    ) -> None:
        self._settings = settings
        self._store = store if store is not None else TokenStore(settings)
        self._verifier = verifier if verifier is not None else Verifier(settings)
        self._open_browser = open_browser
        self._server_factory = server_factory

    def login(self, enterprise_domain: str) -> str:
        """Return a valid client auth token, logging in through the browser if needed.

        Raises:
            VerificationError: If the stored token could not be checked.
            NoTokenReceivedError: If the browser redirect carried no token.
            LoginTimeoutError: If no redirect arrived within the login timeout.
            AuthError: If the redirect listener could not be started.
        """
        saved_token = self._store.read()
        if saved_token:
            debug("Local client auth token found, verifying it with platform...")
            if self._verifier.check(saved_token, enterprise_domain):
                debug("Local client token is valid, no need for login.")
                return saved_token

        received: concurrent.futures.Future[Optional[str]] = concurrent.futures.Future()
        server = self._server_factory(
            enterprise_domain=enterprise_domain,
            received=received,
            port=self._settings.callback_port,
            info_url=self._settings.info_url,
            open_browser=self._open_browser,
        )
        info("Redirecting to the login page in your browser...")
        try:
            server.start()
            new_token = server.wait(timeout=self._settings.login_timeout)
        finally:
            server.close()

        if not new_token:
            raise NoTokenReceivedError("Did not receive an auth token after logging in.")

        self._store.save(new_token)
        return new_token

    def logout(self) -> bool:
        """Forget the persisted token.

        Returns:
            ``True`` if the store was cleared (or already empty).
        """
        return self._store.clear()
