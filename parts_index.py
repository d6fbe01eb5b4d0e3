"""In-memory index of bio part SVG drawings stored on disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

BIO_SVG_PATH = os.getenv("BIO_SVG_PATH", str(Path.cwd() / "assets" / "svg"))

LOGGER = logging.getLogger(__name__)


class PartNotFoundError(KeyError):
    pass


class PartsIndex:
    """Maps part ids (SVG file stems) to raw SVG text, loaded once."""

    def __init__(self, parts: dict[str, str] | None = None) -> None:
        self._parts: dict[str, str] = dict(parts or {})

    @classmethod
    def load(cls, directory: str | Path = BIO_SVG_PATH) -> PartsIndex:
        """Read every ``*.svg`` in ``directory``; creates the directory if missing."""
        path = Path(directory)
        if not path.exists():
            path.mkdir(parents=True, exist_ok=True)
            LOGGER.warning("SVG assets directory did not exist, created at %s. Add your .svg files here.", path)

        parts: dict[str, str] = {}
        for file in sorted(path.iterdir()):
            if not file.is_file() or file.suffix.lower() != ".svg":
                continue
            try:
                parts[file.stem] = file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.error("Error reading SVG file %s: %s", file.name, exc)

        LOGGER.info("Loaded %s bio part SVGs from %s", len(parts), path)
        return cls(parts)

    def ids(self) -> list[str]:
        return list(self._parts)

    def search(self, query: str = "") -> list[dict[str, str]]:
        """Parts whose id contains ``query`` (case-insensitive); all parts for an empty query."""
        needle = query.lower()
        return [{"id": part_id, "name": part_id} for part_id in self._parts if needle in part_id.lower()]

    def get_svg(self, part_id: str) -> str:
        try:
            return self._parts[part_id]
        except KeyError:
            raise PartNotFoundError(part_id) from None


def parts_as_json(parts: list[dict[str, str]]) -> str:
    return json.dumps(parts)
