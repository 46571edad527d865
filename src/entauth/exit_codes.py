"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~entauth.exceptions.EntauthError` subclass.
CI scripts wrapping ``entauth login`` can tell "you need to log in again"
apart from "the service is unreachable" without parsing stderr.

Example::

    $ entauth verify
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the stored token was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Login did not complete or the token was rejected."""

EXIT_CONNECTION_ERROR = 6
"""The token could not be verified (network failure, timeout, unexpected status)."""
