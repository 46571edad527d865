"""Persistent store for the single client auth token.

The token lives in ``~/.local/share/entauth/auth/tokens.json`` (XDG) or the
platform-equivalent directory, as a JSON list of
:class:`~entauth.models.TokenRecord` objects.  At steady state the list holds
zero or one record.

Writes replace the whole file atomically (temp file in the same directory,
fsync, ``os.replace``, ``0o600``), so a save either leaves the previous
content in place or the new single record -- never an empty file and never
two tokens.  If the file is ever found holding several records it is
rewritten with only the first one on the next :meth:`TokenStore.read`.

Storage failures are soft: they are logged and reported through return
values, because a login that obtained a token should still succeed when the
token cannot be cached.

See Also:
    :class:`~entauth.auth.login.LoginOrchestrator` -- the main consumer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from entauth.config import atomic_write, get_data_dir
from entauth.exceptions import PersistenceError
from entauth.models import AuthSettings, TokenRecord
from entauth.output import debug, error, warning

_STORE_FILENAME = "tokens.json"

_records_adapter = TypeAdapter(list[TokenRecord])


def _auth_dir() -> Path:
    """Return the auth data directory, creating it if needed."""
    path = get_data_dir() / "auth"
    path.mkdir(parents=True, exist_ok=True)
    return path


class TokenStore:
    """Read, save, and clear the locally cached client auth token.

    An override token configured in :class:`~entauth.models.AuthSettings`
    always wins over the persisted one and is returned by :meth:`read`
    without opening the store file.

    Args:
        settings: Process-wide auth settings (for the override token).
        path: Explicit store file location. Defaults to
            ``<data dir>/auth/tokens.json``.

    Example::

        store = TokenStore(load_settings())
        store.save("tok123")
        assert store.read() == "tok123"
    """

    def __init__(self, settings: AuthSettings, path: Optional[Path] = None) -> None:
        self._settings = settings
        self._path = path if path is not None else _auth_dir() / _STORE_FILENAME

    @property
    def path(self) -> Path:
        """The filesystem path of the store file."""
        return self._path

    def read(self) -> Optional[str]:
        """Return the current token, or ``None`` if there is none.

        Precedence: the override token from settings, then the first stored
        record.  When more than one record is stored, all but the first are
        deleted as a side effect (best-effort; failures are logged).  A
        store that cannot be read is logged and treated as empty.
        """
        if self._settings.auth_token:
            debug("Read client auth token from environment")
            return self._settings.auth_token

        try:
            records = self._load_records()
        except PersistenceError as exc:
            warning(f"Ignoring unreadable token store: {exc}")
            return None

        if not records:
            return None

        token = records[0].token
        if len(records) > 1:
            debug(f"Found {len(records)} stored client auth tokens, clearing up...")
            try:
                self._write_records(records[:1])
            except OSError as exc:
                error(f"An error occurred while clearing up duplicate client auth tokens: {exc}")
        debug("Retrieved client auth token from local store")
        return token

    def save(self, token: str) -> bool:
        """Replace everything in the store with a single record for *token*.

        Returns:
            ``True`` if the token was written, ``False`` if the write failed
            (the previous content is then left untouched).
        """
        try:
            self._write_records([TokenRecord(token=token)])
        except OSError as exc:
            error(f"An error occurred while saving client auth token to local store: {exc}")
            return False
        debug("Saved client auth token to local store")
        return True

    def clear(self) -> bool:
        """Delete all stored tokens.  A missing store is not an error.

        Returns:
            ``True`` on success, ``False`` if the store file could not be removed.
        """
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            error(f"An error occurred while clearing the client auth token: {exc}")
            return False
        debug("Cleared persisted auth token (if any)")
        return True

    def _load_records(self) -> list[TokenRecord]:
        if not self._path.is_file():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
            return _records_adapter.validate_python(json.loads(text))
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            raise PersistenceError(f"Cannot read token store {self._path}: {exc}") from exc

    def _write_records(self, records: list[TokenRecord]) -> None:
        data = _records_adapter.dump_python(records, mode="json")
        atomic_write(self._path, json.dumps(data, indent=2) + "\n")
