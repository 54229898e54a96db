from .config import Settings, config_path, load_cfg, resolve_settings, save_cfg
from .download import fetch_asset
from .errors import AirFetchError
from .http import make_session
from .layout import resolve_subdir, target_dir
from .reconcile import Reconciler
from .registry import RegistryClient
from .sidecar import read_sidecar, sidecar_path, write_sidecar
from .urn import parse_urn
from .utils import hashes_match, human_size, sha256_file

__all__ = [
    "parse_urn",
    "resolve_subdir", "target_dir",
    "RegistryClient",
    "sha256_file", "hashes_match", "human_size",
    "fetch_asset",
    "read_sidecar", "write_sidecar", "sidecar_path",
    "Reconciler",
    "AirFetchError",
    "make_session",
    "Settings", "config_path", "load_cfg", "save_cfg", "resolve_settings",
    "setup_logging",
]

# ---- simple logging toggle for the package ----
import logging

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    # quiet down noisy deps
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
