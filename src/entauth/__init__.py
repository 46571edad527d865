"""entauth -- log a command-line client in to an enterprise service.

The client opens the service's login page in the user's browser, receives
the issued token on a short-lived local HTTP listener, and caches it so that
later invocations skip the browser round-trip while the token stays valid.

Typical workflow::

    entauth login --domain https://app.example.com
    entauth status
    entauth logout

Modules:
    app: Typer application and CLI entry point.
    auth: Token store, verifier, redirect server, and login orchestration.
    models: Pydantic models shared across the package.
    config: XDG paths, atomic writes, and environment settings.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
