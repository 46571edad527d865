"""Typer application and CLI entry point for entauth.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers the auth commands,
and invokes the Typer app. :class:`~entauth.exceptions.EntauthError` exits
with its mapped code; anything else is written to a crash log under the data
directory.

See Also:
    :mod:`entauth.config`: Environment settings loaded in :func:`main_callback`.
    :mod:`entauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from entauth import __version__
from entauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="entauth",
    help="Log in to an enterprise service from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"entauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~entauth.output.OutputManager` and reads the
    ``ENTAUTH_*`` environment once into ``ctx.obj["settings"]``.
    """
    from entauth.config import load_settings
    from entauth.exceptions import ConfigError
    from entauth.output import OutputFormat, OutputManager, error, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    try:
        settings = load_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _register_commands() -> None:
    from entauth.commands.auth import (
        login_command,
        logout_command,
        status_command,
        verify_command,
    )

    app.command("login")(login_command)
    app.command("logout")(logout_command)
    app.command("status")(status_command)
    app.command("verify")(verify_command)


_register_commands()


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from entauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``entauth`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from entauth.exceptions import EntauthError
        from entauth.output import error

        if isinstance(exc, EntauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
