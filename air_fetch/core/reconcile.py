# air_fetch/core/reconcile.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, List, Optional

import requests

from .download import fetch_asset
from .errors import SidecarMismatch
from .layout import resolve_subdir, target_dir
from .models import DOWNLOADED, UP_TO_DATE, UPDATED, FileEntry, Identifier, Outcome, VersionRecord
from .registry import RegistryClient
from .sidecar import read_sidecar
from .urn import parse_urn
from .utils import hashes_match, sha256_file

logger = logging.getLogger(__name__)

FileProgressCB = Callable[[str, int, int], None]  # (file name, downloaded_bytes, total_bytes)


class Reconciler:
    """
    Brings local copies of a model version in line with the registry.

    Files are handled one at a time in registry order. A file is fetched when it
    is missing or its sha256 differs from the declared hash, otherwise left alone.
    The first failure aborts the run.
    """

    def __init__(
        self,
        session: requests.Session,
        token: str,
        base_dir: Path,
        structured: bool = False,
        registry: Optional[RegistryClient] = None,
        on_progress: Optional[FileProgressCB] = None,
    ):
        self.session = session
        self.token = token
        self.base_dir = Path(base_dir)
        self.structured = structured
        self.registry = registry or RegistryClient(session)
        self.on_progress = on_progress

    def path_for(self, ident: Identifier, entry: FileEntry, base_dir: Optional[Path] = None) -> Path:
        return target_dir(base_dir or self.base_dir, ident, self.structured) / entry.name

    def _fetch(self, ident: Identifier, entry: FileEntry, path: Path) -> None:
        cb = None
        if self.on_progress:
            name = entry.name
            cb = lambda done, total: self.on_progress(name, done, total)
        fetch_asset(
            self.session, entry.download_url, self.token, path, ident.urn,
            expected_hash=entry.content_hash, on_progress=cb,
        )

    def reconcile_file(self, ident: Identifier, entry: FileEntry, base_dir: Optional[Path] = None) -> Outcome:
        path = self.path_for(ident, entry, base_dir)
        if not path.exists():
            logger.info("%s: downloading missing file", path)
            self._fetch(ident, entry, path)
            return Outcome(entry, path, DOWNLOADED)

        digest = sha256_file(path)
        if hashes_match(digest, entry.content_hash):
            logger.info("%s: up to date", path)
            return Outcome(entry, path, UP_TO_DATE)

        logger.info("%s: hash mismatch, updating (local %s, registry %s)", path, digest, entry.content_hash)
        self._fetch(ident, entry, path)
        return Outcome(entry, path, UPDATED)

    def reconcile(
        self, ident: Identifier, version: VersionRecord, all_files: bool = False, base_dir: Optional[Path] = None,
    ) -> List[Outcome]:
        entries = version.files if all_files else version.files[:1]
        return [self.reconcile_file(ident, e, base_dir) for e in entries]

    def run(self, urn: str, all_files: bool = False, base_dir: Optional[Path] = None) -> List[Outcome]:
        ident = parse_urn(urn)
        logger.debug("Parsed %s -> model %d version %d", urn, ident.model_id, ident.version_id)
        version = self.registry.get_version(ident.model_id, ident.version_id)
        return self.reconcile(ident, version, all_files=all_files, base_dir=base_dir)

    def sidecar_base_dir(self, ident: Identifier, sidecar_file: Path) -> Path:
        """Base directory that places ident's files next to sidecar_file under the current layout."""
        asset_dir = Path(sidecar_file).resolve().parent
        sub = resolve_subdir(ident.resource_type, ident.ecosystem, self.structured).parts
        if not sub:
            return asset_dir
        if asset_dir.parts[-len(sub):] != sub:
            raise SidecarMismatch(
                f"Sidecar {sidecar_file} is not inside a {'/'.join(sub)} directory; "
                f"check the structured layout setting or give the base directory explicitly"
            )
        return asset_dir.parents[len(sub) - 1]

    def run_from_sidecar(self, sidecar_file: Path, base_dir: Optional[Path] = None) -> List[Outcome]:
        """
        Update mode: the stored URN replaces a user-supplied one and every file is checked.
        Files are reconciled where the sidecar sits. An explicit base_dir must agree with that spot.
        """
        meta = read_sidecar(sidecar_file)
        ident = parse_urn(meta.urn)
        derived = self.sidecar_base_dir(ident, sidecar_file)
        if base_dir is not None and Path(base_dir).resolve() != derived:
            raise SidecarMismatch(
                f"Sidecar {sidecar_file} belongs under {derived}, not under base directory {base_dir}"
            )
        logger.info("Updating %s from sidecar %s (base %s)", meta.urn, sidecar_file, derived)
        return self.run(meta.urn, all_files=True, base_dir=derived)
