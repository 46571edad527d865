"""Exception hierarchy for entauth.

All exceptions inherit from :class:`EntauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`entauth.exit_codes`.
The top-level error handler in :func:`entauth.app.main` catches
``EntauthError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    EntauthError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- AuthError               (exit 3)
    |   +-- NoTokenReceivedError (exit 3)
    |   +-- LoginTimeoutError    (exit 3)
    +-- VerificationError       (exit 6)
    +-- PersistenceError        (exit 1)
    +-- ConfigError             (exit 1)

A rejected token is not an exception: :meth:`Verifier.check
<entauth.auth.verifier.Verifier.check>` returns ``False`` for it.
"""

from entauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class EntauthError(Exception):
    """Base exception for all entauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`entauth.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(EntauthError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(EntauthError):
    """Raised when a login attempt cannot complete."""

    exit_code = EXIT_AUTH_FAILURE


class NoTokenReceivedError(AuthError):
    """Raised when the browser redirect arrived without a usable ``jwt`` value."""


class LoginTimeoutError(AuthError):
    """Raised when no browser redirect arrived within the login timeout."""


class VerificationError(EntauthError):
    """Raised when the service could not answer whether a token is valid.

    Covers network failures, timeouts, and any response other than 2xx or
    401. Never raised for a rejected token.
    """

    exit_code = EXIT_CONNECTION_ERROR


class PersistenceError(EntauthError):
    """Raised when the local token store cannot be read or written."""

    exit_code = EXIT_GENERIC_FAILURE


class ConfigError(EntauthError):
    """Raised for configuration problems (bad environment values, missing domain)."""

    exit_code = EXIT_GENERIC_FAILURE
