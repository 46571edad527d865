"""Token verification against the enterprise service.

:class:`Verifier` asks ``GET <domain>/token/verify`` whether a client auth
token is still accepted.  Exactly one outcome means "invalid": HTTP 401.
Everything else that is not a 2xx -- network failures, timeouts, server
errors, unexpected redirects -- is raised as
:class:`~entauth.exceptions.VerificationError`, so an unreachable service is
never mistaken for an expired login.
"""

from __future__ import annotations

from typing import Optional

import httpx

from entauth.exceptions import VerificationError
from entauth.models import AuthSettings, make_auth_header
from entauth.output import debug

VERIFY_PATH = "/token/verify"


class Verifier:
    """Check client auth tokens with the enterprise service.

    Args:
        settings: Process-wide auth settings (selects the auth header name).
        timeout: Request timeout in seconds.
        transport: Optional custom httpx transport, mainly for tests
            (``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: AuthSettings,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    def check(self, token: str, domain: str) -> bool:
        """Return whether *token* is currently valid for *domain*.

        Args:
            token: The client auth token to verify.
            domain: Enterprise domain base URL (no trailing slash).

        Returns:
            ``True`` on a 2xx response, ``False`` on 401.

        Raises:
            VerificationError: On any other response or transport failure.
        """
        url = f"{domain}{VERIFY_PATH}"
        debug(f"Checking client auth token with platform: {url}")
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(url, headers=make_auth_header(token, self._settings))
        except httpx.HTTPError as exc:
            raise VerificationError(
                f"An error occurred while verifying client auth token with platform: {exc}"
            ) from exc

        if response.status_code == 401:
            valid = False
        elif response.is_success:
            valid = True
        else:
            raise VerificationError(
                "An error occurred while verifying client auth token with platform: "
                f"unexpected status {response.status_code}"
            )

        debug(f"Checked client auth token with platform - valid: {valid}")
        return valid
