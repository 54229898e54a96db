# air_fetch/cli.py
from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core import (
    Reconciler, RegistryClient, make_session, parse_urn, resolve_settings, save_cfg, setup_logging,
)
from .core.config import ENV_BASE_DIR, ENV_TOKEN
from .core.errors import AirFetchError
from .ui import DownloadProgress, show_error, show_identifier, show_outcomes, console

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="air-fetch", description="Download and verify models named by AIR URNs")
    ap.add_argument("urn", nargs="?", help="Model URN, e.g. urn:air:sdxl:checkpoint:civitai:1234@5678")
    ap.add_argument("--update", metavar="SIDECAR", help="Re-check the model recorded in a .metadata.json sidecar")
    ap.add_argument("-t", "--token", help=f"Bearer token (default: ${ENV_TOKEN})")
    ap.add_argument("-o", "--base-dir", help=f"Base directory (default: ${ENV_BASE_DIR}, settings file, or cwd; with --update: the sidecar location)")
    ap.add_argument("--structured", action=argparse.BooleanOptionalAction, default=None,
                    help="Place files in <type>s/ subdirectories (ComfyUI models layout)")
    ap.add_argument("--all-files", action="store_true", help="Reconcile every file of the version, not just the first")
    ap.add_argument("--registry", help="Registry API base URL")
    ap.add_argument("--save-defaults", action="store_true", help="Store base dir / layout / registry in the settings file")
    ap.add_argument("--verbose", action="store_true", default=None, help="Enable debug logging for core/network")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = ap.parse_args(argv)
    if bool(args.urn) == bool(args.update):
        ap.error("give exactly one of URN or --update SIDECAR")
    return args


def run(args: argparse.Namespace) -> int:
    settings = resolve_settings(
        token=args.token, base_dir=args.base_dir, structured=args.structured,
        registry=args.registry, verbose=args.verbose,
    )
    setup_logging(verbose=settings.verbose)
    if args.save_defaults:
        p = save_cfg({
            "base_dir": str(settings.base_dir), "structured": settings.structured,
            "registry": settings.registry, "verbose": settings.verbose,
        })
        logger.info("Saved defaults to %s", p)

    with make_session() as session, DownloadProgress() as progress:
        rec = Reconciler(
            session, settings.token, settings.base_dir, structured=settings.structured,
            registry=RegistryClient(session, settings.registry), on_progress=progress,
        )
        if args.update:
            # without -o the sidecar location decides where the files live
            pinned = settings.base_dir if args.base_dir else None
            outcomes = rec.run_from_sidecar(Path(args.update), base_dir=pinned)
        else:
            show_identifier(parse_urn(args.urn))
            outcomes = rec.run(args.urn, all_files=args.all_files)

    show_outcomes(outcomes)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return run(args)
    except AirFetchError as e:
        show_error(e)
        return e.exit_code
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/]")
        return 130
