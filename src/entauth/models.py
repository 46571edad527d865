"""Canonical Pydantic models shared across entauth modules.

Two shapes live here:

* :class:`TokenRecord` -- one persisted client auth token, serialised into
  the token store file.
* :class:`AuthSettings` -- process-wide configuration read once from the
  environment by :func:`entauth.config.load_settings` and passed explicitly
  to the components that need it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

CI_TOKEN_HEADER = "x-ci-token"
ACCESS_TOKEN_HEADER = "x-access-auth-token"

DEFAULT_INFO_URL = "https://docs.entauth.dev/cli/logged-in"
DEFAULT_LOGIN_TIMEOUT = 300.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenRecord(BaseModel):
    """A single client auth token as stored on disk.

    Attributes:
        token: The opaque credential string.
        created_at: When the token was stored (UTC).
    """

    token: str = Field(description="The client auth token")
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="When this record was written",
    )


class AuthSettings(BaseModel):
    """Authentication settings resolved once at process start.

    Example::

        settings = AuthSettings(auth_token="ci-123")
        assert settings.auth_header == "x-ci-token"
    """

    auth_token: Optional[str] = Field(
        default=None,
        description="Override token; bypasses the token store and the browser flow",
    )
    scheduled: bool = Field(
        default=False,
        description="Running under a scheduled/managed runner",
    )
    login_timeout: Optional[float] = Field(
        default=DEFAULT_LOGIN_TIMEOUT,
        description="Seconds to wait for the browser redirect (None = wait forever)",
    )
    callback_port: Optional[int] = Field(
        default=None,
        description="Fixed port for the redirect listener (None = OS-assigned)",
    )
    info_url: str = Field(
        default=DEFAULT_INFO_URL,
        description="Page the browser is sent to after the callback",
    )

    @property
    def auth_header(self) -> str:
        """Name of the header that carries the token on authenticated calls.

        An override token outside of a scheduled runner is a CI token;
        everything else is a regular access token.
        """
        if self.auth_token and not self.scheduled:
            return CI_TOKEN_HEADER
        return ACCESS_TOKEN_HEADER


def make_auth_header(token: str, settings: AuthSettings) -> dict[str, str]:
    """Build the auth header dict for a request carrying *token*."""
    return {settings.auth_header: token}
