"""Command-line interface for Backdrop.

Resolves a single scene background using the configured services and
prints the resulting reference.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console

from backdrop.core.config.loader import load_app_config
from backdrop.core.scenes.gradients import KNOWN_GRADIENTS
from backdrop.core.scenes.models import ResolutionOptions, is_known_setting
from backdrop.core.session import BackdropSession
from backdrop.core.utils.logging import configure_logging

console = Console()
logger = logging.getLogger(__name__)


def _options_from_args(args: argparse.Namespace) -> ResolutionOptions:
    return ResolutionOptions(
        creative_prompt=None if args.edit else args.prompt,
        edit_prompt=args.prompt if args.edit else None,
        edit_mode=args.edit,
        image_url=args.image_url,
        scene_asset_id=args.scene_asset_id,
        mood=args.mood,
        customer_context=args.customer_context,
        scene_type=args.scene_type,
        managed_asset_id=args.managed_asset_id,
        managed_tag=args.managed_tag,
        existing_background=args.existing_background,
    )


async def resolve_async(args: argparse.Namespace) -> int:
    """Resolve one background and print it.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        app_config = load_app_config(Path(args.config) if args.config else None)
    except Exception as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        return 1

    configure_logging(app_config.logging, level=args.log_level)

    if not is_known_setting(args.setting):
        console.print(
            f"[yellow]Setting '{args.setting}' is open-ended (treated as novel)[/yellow]"
        )

    async with BackdropSession(app_config) as session:
        reference = await session.resolver.resolve(args.setting, options=_options_from_args(args))

    if reference in KNOWN_GRADIENTS.values():
        console.print("[yellow]No image resolved, using fallback gradient[/yellow]")
    console.print(reference, soft_wrap=True)
    return 0


def run_resolve(args: argparse.Namespace) -> None:
    """Run the resolve command."""
    sys.exit(asyncio.run(resolve_async(args)))


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="backdrop",
        description="Backdrop - dynamic scene background resolution",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    res = sub.add_parser("resolve", help="Resolve a background for a setting")
    res.add_argument("--setting", required=True, help="Scene setting (e.g. bathroom, travel)")
    res.add_argument("--prompt", help="Creative prompt (edit prompt with --edit)")
    res.add_argument("--edit", action="store_true", help="Edit a seed image instead of generating")
    res.add_argument("--image-url", help="Explicit image override")
    res.add_argument("--scene-asset-id", help="Registry asset id to record usage against")
    res.add_argument("--mood", help="Registry mood filter")
    res.add_argument("--customer-context", help="Registry customer-context filter")
    res.add_argument("--scene-type", help="Registry scene type")
    res.add_argument("--managed-asset-id", help="Managed-asset id to fetch")
    res.add_argument("--managed-tag", help="Managed-asset tag to fetch by")
    res.add_argument("--existing-background", help="Background to preserve verbatim")
    res.add_argument(
        "--config",
        default=None,
        help="Path to app config JSON/YAML (default: backdrop.yaml if present)",
    )
    res.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override the configured log level",
    )

    return p


def main() -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args()

    if args.cmd == "resolve":
        run_resolve(args)


if __name__ == "__main__":
    main()
