"""Model stores: resolve a model name to its serialized blob."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path
from typing import Dict, MutableMapping, Protocol

from loguru import logger

from ..core.errors import ModelLookupError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class ModelStore(Protocol):
    """Protocol implemented by model stores."""

    def load(self, name: str) -> str | bytes:
        """Return the stored blob for ``name`` or raise :class:`ModelLookupError`."""


class InMemoryModelStore:
    """Dictionary-backed store, mostly useful for tests and embedding."""

    def __init__(self, models: MutableMapping[str, str] | None = None) -> None:
        self._models: Dict[str, str] = dict(models or {})

    def save(self, name: str, blob: str) -> None:
        self._models[name] = blob

    def load(self, name: str) -> str:
        try:
            return self._models[name]
        except KeyError as exc:
            raise ModelLookupError(f"No stored model named {name!r}") from exc

    def __contains__(self, name: object) -> bool:
        return name in self._models


class DirectoryModelStore:
    """Store each model as ``<root>/<name>.json``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        if not name or Path(name).name != name or name in {".", ".."}:
            raise ValueError(f"Invalid model name {name!r}")
        return self.root / f"{name}.json"

    def save(self, name: str, blob: str) -> Path:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(blob, encoding="utf-8")
        return path

    def load(self, name: str) -> str:
        try:
            path = self.path_for(name)
        except ValueError as exc:
            raise ModelLookupError(str(exc)) from exc
        logger.debug("Loading model {} from {}", name, path)
        if not path.exists():
            raise ModelLookupError(f"No stored model named {name!r} under {self.root}")
        return path.read_text(encoding="utf-8")


class SqliteModelStore:
    """Read the ``config`` column of a one-row table named after the model.

    ``name`` may be schema-qualified (``iris.model``) so that models living in
    attached databases resolve too.
    """

    def __init__(self, conn: sqlite3.Connection, column: str = "config") -> None:
        if not _IDENTIFIER.match(column) or "." in column:
            raise ValueError(f"Invalid column name {column!r}")
        self.conn = conn
        self.column = column

    @staticmethod
    def quote(name: str) -> str:
        if not _IDENTIFIER.match(name):
            raise ModelLookupError(f"Invalid model table name {name!r}")
        return ".".join(f'"{part}"' for part in name.split("."))

    def save(self, name: str, blob: str) -> None:
        table = self.quote(name)
        with self.conn:
            self.conn.execute(f"drop table if exists {table}")
            self.conn.execute(f"create table {table}({self.column} text)")
            self.conn.execute(f"insert into {table}({self.column}) values (?)", (blob,))

    def load(self, name: str) -> str | bytes:
        table = self.quote(name)
        logger.debug("Loading model {} from sqlite", name)
        try:
            row = self.conn.execute(f"select {self.column} from {table} limit 1").fetchone()
        except sqlite3.OperationalError as exc:
            raise ModelLookupError(f"No stored model named {name!r}: {exc}") from exc
        if row is None:
            raise ModelLookupError(f"Model table {name!r} is empty")
        return row[0]


__all__ = ["ModelStore", "InMemoryModelStore", "DirectoryModelStore", "SqliteModelStore"]
