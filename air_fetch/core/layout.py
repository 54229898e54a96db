# air_fetch/core/layout.py
from __future__ import annotations
import re
from pathlib import Path
from typing import Dict, List

from .models import Identifier

# Structured layout follows ComfyUI's models/ tree. Rows are checked in order;
# the first row whose ecosystem and type patterns both match wins. Extend as needed.
LAYOUT_OVERRIDES: List[Dict[str, str]] = [
    # Flux checkpoints are diffusion models only; ComfyUI loads them from unet/
    {"ecosystem": r"^flux", "type": r"^checkpoint$", "dir": "unet"},
]


def pluralize(resource_type: str) -> str:
    return resource_type + "s"


def resolve_subdir(resource_type: str, ecosystem: str, structured: bool) -> Path:
    if not structured:
        return Path("")
    for row in LAYOUT_OVERRIDES:
        if re.search(row["ecosystem"], ecosystem) and re.search(row["type"], resource_type):
            return Path(row["dir"])
    return Path(pluralize(resource_type))


def target_dir(base_dir: Path, ident: Identifier, structured: bool) -> Path:
    return Path(base_dir) / resolve_subdir(ident.resource_type, ident.ecosystem, structured)
