# air_fetch/core/config.py
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError
from .registry import DEFAULT_REGISTRY

logger = logging.getLogger(__name__)

# ---- schema & defaults -------------------------------------------------------
SCHEMA_VERSION = 1
DEFAULT_CFG: Dict[str, Any] = {
    "schema": SCHEMA_VERSION,
    "base_dir": "",              # empty = current directory
    "structured": False,         # ComfyUI-style models/<type>s layout
    "registry": DEFAULT_REGISTRY,
    "verbose": False,
}
# Settings that may be persisted. The token never is.
PERSISTED_KEYS = ("base_dir", "structured", "registry", "verbose")

# ---- environment -------------------------------------------------------------
ENV_TOKEN = "CIVITAI_TOKEN"
ENV_BASE_DIR = "AIR_FETCH_BASE_DIR"
ENV_REGISTRY = "AIR_FETCH_REGISTRY"

# ---- locations ---------------------------------------------------------------
# You can override location with env vars:
#   AIR_FETCH_CONFIG=<full path to config.json>
#   AIR_FETCH_DIR=<directory to place config.json>
def _windows_roaming_dir() -> Path:
    return Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))

def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

def config_dir() -> Path:
    env_dir = os.environ.get("AIR_FETCH_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    if os.name == "nt":
        return (_windows_roaming_dir() / "air_fetch").resolve()
    return (_xdg_config_home() / "air_fetch").resolve()

def config_path() -> Path:
    env_path = os.environ.get("AIR_FETCH_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return config_dir() / "config.json"

# ---- load / save -------------------------------------------------------------
def _merge_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = DEFAULT_CFG.copy()
    out.update({k: v for k, v in (cfg or {}).items() if k in DEFAULT_CFG})
    out["schema"] = SCHEMA_VERSION
    return out

def load_cfg() -> Dict[str, Any]:
    p = config_path()
    if not p.exists():
        return DEFAULT_CFG.copy()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        # If the file is corrupt, keep a .bad copy and start fresh
        logger.warning("Ignoring unreadable settings file %s: %s", p, e)
        try:
            p.replace(p.with_suffix(".bad.json"))
        except OSError:
            logger.debug("Could not move %s aside", p)
        return DEFAULT_CFG.copy()
    if not isinstance(raw, dict):
        logger.warning("Ignoring settings file %s: not a JSON object", p)
        return DEFAULT_CFG.copy()
    return _merge_defaults(raw)

def save_cfg(cfg: Dict[str, Any]) -> Path:
    p = config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(".tmp")
    data = _merge_defaults({k: cfg[k] for k in PERSISTED_KEYS if k in cfg})
    # Atomic-ish write
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    if p.exists():
        p.replace(p.with_suffix(".bak.json"))
    tmp.replace(p)
    return p

# ---- resolved settings -------------------------------------------------------
@dataclass
class Settings:
    token: str
    base_dir: Path
    structured: bool
    registry: str
    verbose: bool = False


def _file_bool(cfg: Dict[str, Any], key: str) -> bool:
    # only real JSON booleans count; "false" as a string must not switch a flag on
    value = cfg.get(key, DEFAULT_CFG[key])
    if isinstance(value, bool):
        return value
    logger.warning("Ignoring settings value %s=%r: expected true or false", key, value)
    return DEFAULT_CFG[key]


def _first(*values: Optional[str]) -> str:
    for v in values:
        if v:
            return v
    return ""


def resolve_settings(
    token: Optional[str] = None,
    base_dir: Optional[str] = None,
    structured: Optional[bool] = None,
    registry: Optional[str] = None,
    verbose: Optional[bool] = None,
    cfg: Optional[Dict[str, Any]] = None,
    require_token: bool = True,
) -> Settings:
    """
    Precedence per setting: explicit value > environment > settings file > default.
    Missing token raises ConfigError unless require_token is False.
    """
    cfg = _merge_defaults(load_cfg() if cfg is None else cfg)
    env = os.environ

    tok = _first(token, env.get(ENV_TOKEN))
    if require_token and not tok:
        raise ConfigError(f"No API token: pass --token or set {ENV_TOKEN}")

    base = _first(base_dir, env.get(ENV_BASE_DIR), cfg.get("base_dir")) or "."
    return Settings(
        token=tok,
        base_dir=Path(base).expanduser(),
        structured=_file_bool(cfg, "structured") if structured is None else structured,
        registry=_first(registry, env.get(ENV_REGISTRY), cfg.get("registry")) or DEFAULT_REGISTRY,
        verbose=_file_bool(cfg, "verbose") if verbose is None else verbose,
    )
