# air_fetch/core/download.py
from __future__ import annotations
from pathlib import Path
from typing import Callable, Optional
import logging
import os

import requests

from .errors import DownloadFailed, IntegrityMismatch, LocalIOError, TransportError, UnknownSize
from .sidecar import write_sidecar
from .utils import hashes_match, sha256_file

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int, int], None]  # (downloaded_bytes, total_bytes)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"} if token else {}


def content_length(r: requests.Response) -> int:
    raw = (r.headers.get("Content-Length") or "").strip()
    if not raw.isdigit():
        raise UnknownSize(f"Server did not declare a Content-Length for {r.url}")
    return int(raw)


def fetch_asset(
    session: requests.Session,
    url: str,
    token: str,
    out_path: Path,
    urn: str,
    expected_hash: str = "",
    on_progress: Optional[ProgressCB] = None,
    chunk_size: int = 128 * 1024,
    timeout: int = 30,
) -> Path:
    """
    Stream one asset to disk, then record the fetch in its sidecar.
    - Overwrites out_path in place (no resume)
    - Calls on_progress(downloaded, total) after every chunk
    - Optional sha256 verify of the written file
    - The sidecar is only written once the full body is on disk
    """
    out_path = Path(out_path)
    logger.debug("Starting download %s -> %s", url, out_path)

    try:
        r = session.get(url, stream=True, headers=auth_headers(token), timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"Cannot connect to {url}: {e}") from e

    with r:
        if not 200 <= r.status_code < 300:
            raise DownloadFailed(r.status_code, url)
        total = content_length(r)

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            f = open(out_path, "wb")
        except OSError as e:
            raise LocalIOError(f"Cannot open {out_path} for writing: {e}") from e

        downloaded = 0
        with f:
            try:
                for chunk in r.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)
                    if on_progress:
                        on_progress(downloaded, total)
                f.flush()
                os.fsync(f.fileno())
            except requests.RequestException as e:
                raise TransportError(f"Transfer of {url} interrupted after {downloaded} bytes: {e}") from e
            except OSError as e:
                raise LocalIOError(f"Cannot write {out_path}: {e}") from e

    if downloaded < total:
        raise TransportError(f"Transfer of {url} ended early: got {downloaded} of {total} bytes")
    logger.debug("Download finished: %s (%d bytes)", out_path, downloaded)

    if expected_hash:
        digest = sha256_file(out_path)
        if not hashes_match(digest, expected_hash):
            raise IntegrityMismatch(out_path, expected_hash, digest)
        logger.debug("Checksum OK")

    write_sidecar(out_path, urn)
    return out_path
