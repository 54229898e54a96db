# air_fetch/core/registry.py
from __future__ import annotations
import logging
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any, Dict, List

import requests

from .errors import (
    MalformedResponse, NoFilesAvailable, RegistryError, RegistryUnreachable, VersionNotFound,
)
from .models import FileEntry, VersionRecord
from .utils import dig

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "https://civitai.com/api/v1"


def _safe_name(name: str) -> bool:
    # the registry-supplied name becomes a local filename; no directories allowed
    return bool(name) and name not in (".", "..") \
        and PurePosixPath(name).name == name and PureWindowsPath(name).name == name


def parse_file(raw: Any) -> FileEntry:
    if not isinstance(raw, dict):
        raise MalformedResponse(f"File entry is not an object: {raw!r}")
    name, url, sha = raw.get("name"), raw.get("downloadUrl"), dig(raw, "hashes", "SHA256")
    if not isinstance(name, str) or not _safe_name(name):
        raise MalformedResponse(f"File entry has an invalid name: {name!r}")
    if not isinstance(url, str) or not url:
        raise MalformedResponse(f"File {name!r} has no downloadUrl")
    if not isinstance(sha, str) or not sha:
        raise MalformedResponse(f"File {name!r} has no SHA256 hash")
    return FileEntry(name=name, download_url=url, content_hash=sha)


def parse_versions(model_id: int, data: Any) -> List[Dict[str, Any]]:
    versions = dig(data, "modelVersions")
    if not isinstance(versions, list):
        raise MalformedResponse(f"Model {model_id}: response has no modelVersions list")
    for v in versions:
        if not isinstance(v, dict) or not isinstance(v.get("id"), int) or isinstance(v.get("id"), bool):
            raise MalformedResponse(f"Model {model_id}: version entry without an integer id: {v!r}")
    return versions


class RegistryClient:
    """Model metadata lookups. Every call is a fresh round trip; nothing is cached or retried."""

    def __init__(self, session: requests.Session, base_url: str = DEFAULT_REGISTRY, timeout: int = 15):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def model_url(self, model_id: int) -> str:
        return f"{self.base_url}/models/{model_id}"

    def fetch_model(self, model_id: int) -> Any:
        url = self.model_url(model_id)
        logger.debug("GET %s", url)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise RegistryUnreachable(f"Cannot reach registry at {url}: {e}") from e
        if not 200 <= r.status_code < 300:
            raise RegistryError(r.status_code, url)
        try:
            return r.json()
        except ValueError as e:
            raise MalformedResponse(f"Registry response for model {model_id} is not JSON: {e}") from e

    def get_version(self, model_id: int, version_id: int) -> VersionRecord:
        versions = parse_versions(model_id, self.fetch_model(model_id))
        match = next((v for v in versions if v["id"] == version_id), None)
        if match is None:
            raise VersionNotFound(model_id, version_id)

        raw_files = match.get("files")
        if not isinstance(raw_files, list):
            raise MalformedResponse(f"Version {version_id}: files is not a list")
        if not raw_files:
            raise NoFilesAvailable(f"Version {version_id} of model {model_id} has no files")
        files = [parse_file(f) for f in raw_files]
        logger.debug("Version %d: %d file(s), first=%s", version_id, len(files), files[0].name)
        return VersionRecord(version_id=version_id, files=files)
