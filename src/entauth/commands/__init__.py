"""Built-in CLI commands for entauth.

* :mod:`~entauth.commands.auth` -- ``login``, ``logout``, ``status``, and
  ``verify``, registered directly on the root app.
"""
