"""Short-lived local HTTP listener that receives the browser login redirect.

After the user authenticates in the browser, the enterprise login page
redirects to ``http://127.0.0.1:<port>/?jwt=<token>``.  :class:`RedirectServer`
listens for that request, publishes the token once through a one-shot
:class:`~concurrent.futures.Future`, and sends the browser on to an
informational page.

Lifecycle::

    IDLE --start()--> LISTENING --close()--> CLOSED
      \\______________close()_______________/

``start()`` while listening and ``close()`` while closed are no-ops.  A closed
session is never re-armed: ``start()`` after ``close()`` raises
:class:`~entauth.exceptions.AuthError`.

The accept loop runs on a daemon thread, and each connection on its own, so
that :meth:`RedirectServer.start` returns as soon as the listener is bound
and the browser has been launched.  Connections that send nothing are dropped
after :data:`REQUEST_TIMEOUT` seconds.
A failing request is logged and answered on its own; the listener keeps
waiting for the redirect that carries the token.
"""

from __future__ import annotations

import concurrent.futures
import enum
import sys
import threading
import webbrowser
from collections.abc import Callable
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from entauth.exceptions import AuthError, LoginTimeoutError
from entauth.models import DEFAULT_INFO_URL
from entauth.output import debug, error, info, warning

LISTEN_HOST = "127.0.0.1"
LOGIN_PATH = "/cli/login/"
TOKEN_PARAM = "jwt"
# Idle connections (browser preconnects) are dropped after this many seconds.
REQUEST_TIMEOUT = 5.0


class ServerState(str, enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CLOSED = "closed"


class _CallbackHTTPServer(ThreadingHTTPServer):
    """Threaded HTTPServer that reports request failures through :mod:`entauth.output`.

    Each connection gets its own daemon thread, so a stalled client cannot keep
    the redirect from being served or hold up shutdown.
    """

    daemon_threads = True
    block_on_close = False

    def handle_error(self, request: Any, client_address: Any) -> None:  # noqa: ANN401
        exc = sys.exc_info()[1]
        error(f"Auth redirect request from {client_address[0]} failed: {exc}")


class RedirectServer:
    """Capture a client auth token delivered by a browser redirect.

    Args:
        enterprise_domain: Base URL of the enterprise service (no trailing
            slash).  The browser is sent to ``<domain>/cli/login/?cliport=<port>``.
        received: One-shot channel the token is published to.  A fresh
            :class:`~concurrent.futures.Future` is created when omitted.
        port: Fixed port to listen on.  ``None`` lets the OS pick a free one.
        info_url: Where the browser is redirected after the callback.
        open_browser: Browser-launch collaborator; called with the login URL.

    Example::

        with RedirectServer("https://app.example.com") as server:
            token = server.wait(timeout=300)
    """

    def __init__(
        self,
        enterprise_domain: str,
        received: Optional[concurrent.futures.Future[Optional[str]]] = None,
        port: Optional[int] = None,
        info_url: str = DEFAULT_INFO_URL,
        open_browser: Callable[[str], Any] = webbrowser.open,
    ) -> None:
        self._enterprise_domain = enterprise_domain
        self._received: concurrent.futures.Future[Optional[str]] = (
            received if received is not None else concurrent.futures.Future()
        )
        self._port = port
        self._info_url = info_url
        self._open_browser = open_browser
        self._state = ServerState.IDLE
        self._lock = threading.Lock()
        self._httpd: Optional[_CallbackHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def port(self) -> Optional[int]:
        """The bound port, or the requested one before :meth:`start`."""
        return self._port

    @property
    def received(self) -> concurrent.futures.Future[Optional[str]]:
        """The one-shot "token received" channel."""
        return self._received

    @property
    def login_url(self) -> str:
        query = urlencode({"cliport": str(self._port)})
        return f"{self._enterprise_domain}{LOGIN_PATH}?{query}"

    def start(self) -> None:
        """Bind the listener and open the login page in the browser.

        Raises:
            AuthError: If the session was already closed, or the port
                cannot be bound.
        """
        with self._lock:
            if self._state == ServerState.LISTENING:
                return
            if self._state == ServerState.CLOSED:
                raise AuthError("Redirect server session is closed and cannot be restarted")

            try:
                httpd = _CallbackHTTPServer(
                    (LISTEN_HOST, self._port or 0), self._make_handler()
                )
            except OSError as exc:
                raise AuthError(
                    f"Cannot listen for the login redirect on port {self._port or 0}: {exc}"
                ) from exc

            self._httpd = httpd
            self._port = httpd.server_address[1]
            self._thread = threading.Thread(
                target=httpd.serve_forever,
                kwargs={"poll_interval": 0.1},
                name=f"entauth-redirect-{self._port}",
                daemon=True,
            )
            self._thread.start()
            self._state = ServerState.LISTENING

        debug(f"Redirect server listening on {LISTEN_HOST}:{self._port}")
        url = self.login_url
        if not self._open_browser(url):
            warning("Could not open a browser automatically.")
            info(f"Open this URL to log in: {url}")

    def wait(self, timeout: Optional[float] = None) -> Optional[str]:
        """Block until the redirect delivers a token.

        Args:
            timeout: Seconds to wait.  ``None`` waits indefinitely.

        Returns:
            The delivered token, or ``None`` if the redirect carried no
            ``jwt`` value or the server was closed before any redirect.

        Raises:
            LoginTimeoutError: If *timeout* elapsed first.
        """
        try:
            return self._received.result(timeout=timeout)
        except concurrent.futures.CancelledError:
            return None
        except concurrent.futures.TimeoutError:
            raise LoginTimeoutError(
                f"Login timed out after {timeout:g} seconds without a browser redirect"
            ) from None

    def close(self) -> None:
        """Shut the listener down.  Safe to call at any point, any number of times."""
        with self._lock:
            if self._state == ServerState.CLOSED:
                return
            httpd, thread = self._httpd, self._thread
            self._httpd = None
            self._thread = None
            self._state = ServerState.CLOSED

        if httpd is not None:
            debug("Shutting down redirect server...")
            httpd.shutdown()
            httpd.server_close()
        if thread is not None:
            thread.join()
        # Release a waiter that would otherwise block on a redirect that can no longer arrive.
        self._received.cancel()

    def __enter__(self) -> RedirectServer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _publish(self, token: Optional[str]) -> None:
        with self._lock:
            if self._received.done():
                debug("Ignoring repeated login redirect")
                return
            self._received.set_result(token)
        debug("Received client auth token" if token else "Login redirect carried no token")

    def _make_handler(self) -> type[BaseHTTPRequestHandler]:
        owner = self

        class RedirectHandler(BaseHTTPRequestHandler):
            timeout = REQUEST_TIMEOUT

            def do_GET(self) -> None:
                parsed = urlparse(self.path)
                if parsed.path != "/":
                    self.send_error(404)
                    return

                values = parse_qs(parsed.query).get(TOKEN_PARAM)
                owner._publish(values[0] if values else None)

                self.send_response(302)
                self.send_header("Location", owner._info_url)
                self.send_header("Content-Length", "0")
                self.end_headers()

            def log_message(self, format: str, *args: Any) -> None:
                debug(f"redirect server: {format % args}")

        return RedirectHandler
