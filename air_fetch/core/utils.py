from __future__ import annotations
import hashlib, math
from pathlib import Path
from typing import Any, Optional

from .errors import LocalIOError

HASH_CHUNK = 1024 * 1024


def human_size(n: Optional[int]) -> str:
    if not n or n <= 0: return "?"
    units = ["B","KB","MB","GB","TB"]
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    return f"{n/(1024**i):.2f} {units[i]}"


def dig(obj: Any, *keys: str) -> Any:
    cur = obj
    for k in keys:
        if not isinstance(cur, dict): return None
        cur = cur.get(k)
    return cur


def sha256_file(path: Path, chunk_size: int = HASH_CHUNK) -> str:
    h = hashlib.sha256()
    try:
        with Path(path).open("rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                h.update(chunk)
    except OSError as e:
        raise LocalIOError(f"Cannot hash {path}: {e}") from e
    return h.hexdigest()


def hashes_match(a: str, b: str) -> bool:
    return (a or "").lower() == (b or "").lower()
