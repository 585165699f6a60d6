"""Durable storage for the single in-progress workout session.

A store exposes ``read()`` returning the stored document or ``None``,
``documents()`` yielding every stored copy in order of preference,
``write(document)`` replacing it and ``clear()`` removing it.
:class:`JsonFileStore` keeps the document in two JSON files so a torn write
to one of them can still be recovered from the other.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from backend import RECOVERY_BASE


class JsonFileStore:
    """Persist the session document to ``<base>_1.json`` and ``<base>_2.json``."""

    def __init__(self, base: Path | str = RECOVERY_BASE) -> None:
        self.base = Path(base)

    @property
    def paths(self) -> tuple[Path, Path]:
        return (
            self.base.with_name(self.base.name + "_1.json"),
            self.base.with_name(self.base.name + "_2.json"),
        )

    def read(self) -> dict | None:
        """Return the first readable copy, or ``None`` when there is none."""

        return next(self.documents(), None)

    def documents(self):
        """Yield every readable copy, primary first."""

        for path in self.paths:
            try:
                if not path.exists():
                    continue
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                data = json.loads(text)
            except (OSError, ValueError):
                logging.warning("Ignoring unreadable session file %s", path)
                continue
            if isinstance(data, dict):
                yield data
            else:
                logging.warning("Ignoring malformed session file %s", path)

    def write(self, document: dict) -> None:
        payload = json.dumps(document)
        self.base.parent.mkdir(parents=True, exist_ok=True)
        for path in self.paths:
            path.write_text(payload, encoding="utf-8")

    def clear(self) -> None:
        for path in self.paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass


class MemoryStore:
    """Keep the session document in memory, mainly for tests."""

    def __init__(self, document: dict | None = None) -> None:
        self.document = document
        self.writes = 0

    def read(self) -> dict | None:
        if self.document is None:
            return None
        return json.loads(json.dumps(self.document))

    def documents(self):
        if self.document is not None:
            yield self.read()

    def write(self, document: dict) -> None:
        self.document = json.loads(json.dumps(document))
        self.writes += 1

    def clear(self) -> None:
        self.document = None
