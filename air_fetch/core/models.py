from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Identifier:
    urn: str
    ecosystem: str
    resource_type: str
    source: str
    model_id: int
    version_id: int
    layer: Optional[str] = None
    format: Optional[str] = None


@dataclass
class FileEntry:
    name: str
    download_url: str
    content_hash: str


@dataclass
class VersionRecord:
    version_id: int
    files: List[FileEntry] = field(default_factory=list)


@dataclass
class SidecarMetadata:
    urn: str
    fetched_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"urn": self.urn, "datetime": self.fetched_at.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SidecarMetadata":
        return cls(urn=data["urn"], fetched_at=datetime.fromisoformat(data["datetime"]))


# Reconciler actions
UP_TO_DATE = "up-to-date"
DOWNLOADED = "downloaded"
UPDATED = "updated"


@dataclass
class Outcome:
    entry: FileEntry
    path: Path
    action: str

    @property
    def fetched(self) -> bool:
        return self.action != UP_TO_DATE
