from __future__ import annotations
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import LocalIOError, SidecarInvalid
from .models import SidecarMetadata

SIDECAR_SUFFIX = ".metadata.json"


def sidecar_path(asset: Path) -> Path:
    asset = Path(asset)
    return asset.with_name(asset.name + SIDECAR_SUFFIX)


def write_sidecar(asset: Path, urn: str, now: Optional[datetime] = None) -> Path:
    meta = SidecarMetadata(urn=urn, fetched_at=now or datetime.now(timezone.utc))
    p = sidecar_path(asset)
    tmp = p.with_name(p.name + ".tmp")
    try:
        tmp.write_text(json.dumps(meta.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(p)
    except OSError as e:
        raise LocalIOError(f"Cannot write sidecar {p}: {e}") from e
    return p


def read_sidecar(path: Path) -> SidecarMetadata:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LocalIOError(f"Cannot read sidecar {path}: {e}") from e
    except ValueError as e:
        raise SidecarInvalid(f"Sidecar {path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("urn"), str) or not raw["urn"]:
        raise SidecarInvalid(f"Sidecar {path} has no 'urn' field")
    try:
        return SidecarMetadata.from_dict(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise SidecarInvalid(f"Sidecar {path} has an invalid 'datetime': {e}") from e
