"""Simple .env file helpers shared by the credential store."""

from __future__ import annotations

import os
from collections import OrderedDict
from pathlib import Path
from typing import List, MutableMapping, Optional, Tuple
from uuid import uuid4


def parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a ``KEY=VALUE`` line; comments, blanks and lines without ``=`` yield None."""

    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def read_env_lines(path: Path) -> List[str]:
    """Return the raw lines of the file, or an empty list when it does not exist."""

    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()


def read_env_file(path: Path) -> MutableMapping[str, str]:
    """Return key/value pairs with upper-cased keys (order preserved, last one wins)."""

    pairs: MutableMapping[str, str] = OrderedDict()
    for raw_line in read_env_lines(path):
        parsed = parse_env_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        pairs[key.upper()] = value
    return pairs


def write_env_lines(path: Path, lines: List[str]) -> None:
    """Persist the given lines atomically (temp file + replace)."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
    content = "\n".join(lines)
    if lines:
        content += "\n"
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
