"""Auth commands -- log in, log out, and inspect the cached token.

Typical workflow::

    entauth login --domain https://app.example.com   # browser round-trip if needed
    entauth verify                                   # is the token still accepted?
    entauth status --json                            # where the token comes from
    entauth logout                                   # forget the cached token

The enterprise domain may also be supplied via ``ENTAUTH_DOMAIN``.
"""

from __future__ import annotations

from typing import NoReturn, Optional

import typer

from entauth.auth import LoginOrchestrator, TokenStore, Verifier
from entauth.config import ENV_DOMAIN, normalize_domain
from entauth.exceptions import EntauthError, InvalidUsageError
from entauth.exit_codes import EXIT_AUTH_FAILURE
from entauth.models import AuthSettings
from entauth.output import error, format_response, info, success, suggest


_DOMAIN_HELP = "Enterprise domain URL, e.g. https://app.example.com."


def _settings(ctx: typer.Context) -> AuthSettings:
    return ctx.obj["settings"]


def _fail(exc: EntauthError) -> NoReturn:
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def login_command(
    ctx: typer.Context,
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", envvar=ENV_DOMAIN, help=_DOMAIN_HELP
    ),
    port: Optional[int] = typer.Option(
        None, "--port", help="Fixed local port for the login redirect."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the browser (0 = no limit)."
    ),
) -> None:
    """Log in to the enterprise service.

    Reuses the cached token when the service still accepts it; otherwise
    opens the login page in your browser and waits for the redirect.
    """
    settings = _settings(ctx)
    updates: dict[str, object] = {}
    if port is not None:
        if not 0 < port < 65536:
            _fail(InvalidUsageError(f"--port out of range: {port}"))
        updates["callback_port"] = port
    if timeout is not None:
        updates["login_timeout"] = timeout if timeout > 0 else None
    if updates:
        settings = settings.model_copy(update=updates)

    try:
        enterprise_domain = normalize_domain(domain)
        LoginOrchestrator(settings).login(enterprise_domain)
    except EntauthError as exc:
        _fail(exc)

    success(f"Logged in to {enterprise_domain}.")


def logout_command(ctx: typer.Context) -> None:
    """Remove the cached client auth token."""
    settings = _settings(ctx)
    if not LoginOrchestrator(settings).logout():
        raise typer.Exit(code=1)
    success("Logged out.")
    if settings.auth_token:
        info("An override token is still set in the environment and will keep being used.")


def status_command(ctx: typer.Context) -> None:
    """Show where the current token comes from, without contacting the service."""
    settings = _settings(ctx)
    store = TokenStore(settings)
    token = store.read()

    if settings.auth_token:
        source: Optional[str] = "environment"
    elif token:
        source = "store"
    else:
        source = None

    format_response(
        {
            "logged_in": token is not None,
            "source": source,
            "auth_header": settings.auth_header,
            "scheduled": settings.scheduled,
            "store_path": str(store.path),
        }
    )
    if token is None:
        suggest("Log in: entauth login --domain <url>")


def verify_command(
    ctx: typer.Context,
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", envvar=ENV_DOMAIN, help=_DOMAIN_HELP
    ),
) -> None:
    """Check the current token with the enterprise service."""
    settings = _settings(ctx)
    try:
        enterprise_domain = normalize_domain(domain)
        token = TokenStore(settings).read()
        if not token:
            error("Not logged in.")
            suggest("Log in: entauth login --domain <url>")
            raise typer.Exit(code=EXIT_AUTH_FAILURE)
        valid = Verifier(settings).check(token, enterprise_domain)
    except EntauthError as exc:
        _fail(exc)

    if not valid:
        error(f"Client auth token was rejected by {enterprise_domain}.")
        suggest("Log in again: entauth login")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    success("Client auth token is valid.")
