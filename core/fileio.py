"""JSON read/write helpers shared by the registry, preferences and state stores."""
from __future__ import annotations

import json
import os
from pathlib import Path

from core.errors import FormatError


def read_json(path: Path) -> object:
    """Parse a JSON file. Raises FormatError for malformed content, OSError for I/O."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Invalid JSON in {path}: {exc}") from exc


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to a temp sibling, then rename it over ``path``."""
    path = Path(path)
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


def write_json(path: Path, data: object) -> None:
    write_text_atomic(path, json.dumps(data, indent=2))
