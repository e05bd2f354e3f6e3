"""Command-line interface for strategy-driven visual generation."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from fv_studio.core.config import get_settings
from fv_studio.core.exceptions import StudioError
from fv_studio.gemini import ApiKeyAuthorizer, GeminiStrategyExtractor, GeminiSynthesizer
from fv_studio.models import SIZE_PRESETS, StructuredStrategy
from fv_studio.orchestrator import GenerationOrchestrator
from fv_studio.utils.images import load_uploaded_asset
from fv_studio.utils.logging import setup_logging


def list_sizes() -> None:
    """Print available size presets."""
    print("Available sizes:\n")
    for key, preset in SIZE_PRESETS.items():
        print(f"  {key}: {preset.label} -> {preset.dimensions.aspect_ratio}")


def print_strategy(strategy) -> None:
    """Print the extracted strategy."""
    print(f"\n{'=' * 60}")
    print("STRATEGY")
    print(f"{'=' * 60}")
    if isinstance(strategy, StructuredStrategy):
        print(f"Target:            {strategy.target}")
        print(f"Value proposition: {strategy.value_prop}")
        print(f"Visual hierarchy:  {strategy.visual_hierarchy}")
        print(f"Color strategy:    {strategy.color_strategy}")
        print(f"Headline copy:     {strategy.copy_suggestion}")
    else:
        print(strategy.blueprint)
    print(f"{'=' * 60}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Extract a success strategy from reference visuals and "
        "generate new visuals from it with Google Gemini",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyse two references and generate a visual from one product shot
  %(prog)s -r ref1.png -r ref2.png -a product.png

  # Pick an output size and add a request
  %(prog)s -r ref.png -a product.png --size pt --request "Spring campaign"

  # Generate, then refine twice (every revision is exported)
  %(prog)s -r ref.png -a product.png --adjust "brighter" --adjust "bigger logo"

  # Freeform blueprint instead of the five-field strategy
  %(prog)s -r ref.png -a product.png --freeform --width 1600 --height 900
        """,
    )

    parser.add_argument(
        "-r",
        "--reference",
        type=Path,
        action="append",
        dest="references",
        default=[],
        help="Reference visual to analyse (can be used multiple times)",
    )
    parser.add_argument(
        "-a",
        "--asset",
        type=Path,
        action="append",
        dest="assets",
        default=[],
        help="Product asset to build the new visual from (can be used multiple times)",
    )
    parser.add_argument(
        "--size",
        choices=list(SIZE_PRESETS.keys()),
        help="Output size preset (default: FV_DEFAULT_SIZE or std)",
    )
    parser.add_argument("--width", type=int, help="Custom output width in pixels")
    parser.add_argument("--height", type=int, help="Custom output height in pixels")
    parser.add_argument(
        "--request",
        default="",
        help="Additional request for the first generation",
    )
    parser.add_argument(
        "--hints",
        help="Additional instructions for the strategy analysis",
    )
    parser.add_argument(
        "--adjust",
        action="append",
        default=[],
        metavar="INSTRUCTION",
        help="Revision instruction applied to the latest result (can be repeated)",
    )
    parser.add_argument(
        "-d",
        "--output-dir",
        type=Path,
        help="Output directory (default: FV_EXPORT_DIR or current directory)",
    )
    parser.add_argument(
        "--prefix",
        help="Filename prefix for exported revisions (default: FV_EXPORT_PREFIX or fv)",
    )
    parser.add_argument(
        "--freeform",
        action="store_true",
        help="Extract a freeform blueprint instead of a structured strategy",
    )
    parser.add_argument(
        "--list-sizes",
        action="store_true",
        help="List available size presets and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )
    return parser


async def run(args: argparse.Namespace) -> list[Path]:
    """Run analysis, first synthesis and revisions; return exported paths."""
    settings = get_settings()
    if args.freeform:
        settings = settings.model_copy(update={"strategy_format": "freeform"})

    orchestrator = GenerationOrchestrator(
        GeminiStrategyExtractor(settings),
        GeminiSynthesizer(settings),
        ApiKeyAuthorizer(settings),
    )

    if args.width is not None and args.height is not None:
        orchestrator.set_dimensions(args.width, args.height)
    else:
        orchestrator.select_size_preset(args.size or settings.default_size_preset)

    for path in args.references:
        orchestrator.add_reference_asset(load_uploaded_asset(path))
    for path in args.assets:
        orchestrator.add_asset(load_uploaded_asset(path))
    orchestrator.set_user_text(args.request)

    output_dir = args.output_dir or settings.export_dir
    prefix = args.prefix or settings.export_prefix

    strategy = await orchestrator.analyze(args.hints)
    print_strategy(strategy)

    exported: list[Path] = []
    await orchestrator.synthesize_initial()
    exported.append(orchestrator.export_current(output_dir, prefix))

    for instruction in args.adjust:
        await orchestrator.request_revision(instruction)
        exported.append(orchestrator.export_current(output_dir, prefix))

    return exported


def main() -> None:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.list_sizes:
        list_sizes()
        return

    if not args.references or not args.assets:
        parser.print_help()
        sys.exit(1)

    if (args.width is None) != (args.height is None):
        print("Error: --width and --height must be given together")
        sys.exit(1)

    setup_logging("DEBUG" if args.verbose else get_settings().log_level)

    try:
        exported = asyncio.run(run(args))
    except (StudioError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    for i, path in enumerate(exported):
        print(f"  Revision {i}: {path}")
    sys.exit(0)


if __name__ == "__main__":
    main()
