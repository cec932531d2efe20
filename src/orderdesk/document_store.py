"""Locked, atomically written JSON document files."""

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from .errors import InvalidSchemaVersionError

SCHEMA_VERSION = 1


class JsonDocumentFile:
    """A JSON file holding one named collection of documents.

    Reads are lock-free; read-modify-write sequences must run inside
    `locked()` so concurrent writers serialize on an exclusive flock.
    """

    def __init__(self, config_dir: Path, filename: str, collection: str):
        self.config_dir = Path(config_dir)
        self.path = self.config_dir / filename
        self.collection = collection
        self._stem = Path(filename).stem

    def _ensure_dir(self) -> None:
        """Ensure the data directory exists."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Acquire exclusive lock on the file for read-modify-write operations."""
        self._ensure_dir()
        lock_path = self.config_dir / f".{self._stem}.lock"
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self) -> dict[str, Any]:
        """
        Load the document file from disk.

        Raises:
            InvalidSchemaVersionError: If schema version is unsupported.
        """
        if not self.path.exists():
            return {"schema_version": SCHEMA_VERSION, self.collection: []}

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        version = data.get("schema_version", 0)
        if version != SCHEMA_VERSION:
            raise InvalidSchemaVersionError(version, SCHEMA_VERSION)

        data.setdefault(self.collection, [])
        return data

    def save(self, data: dict[str, Any]) -> None:
        """
        Save the document file to disk atomically.

        Uses write-to-temp-then-rename for atomicity.
        """
        self._ensure_dir()

        fd, temp_path = tempfile.mkstemp(
            dir=self.config_dir, prefix=f".{self._stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")  # trailing newline
            os.replace(temp_path, self.path)
        except Exception:
            # Clean up temp file on failure (ignore errors if already removed)
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def documents(self) -> list[dict[str, Any]]:
        return self.load()[self.collection]
