"""tilecollapse - fill a grid with tiles using Wave Function Collapse."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.text import Text

from tilecollapse import __version__
from tilecollapse.config import RunConfig, load_config
from tilecollapse.generation import GenerationError, TILESETS, generate_tiles
from tilecollapse.generation.tilesets import TileStyle
from tilecollapse.generation.wfc import (
    ContradictionError,
    Propagation,
    Stepper,
    TileCatalog,
    WFCError,
)
from tilecollapse.logging_config import setup_logging
from tilecollapse.render import render_event, render_grid

logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> RunConfig:
    """Load the run configuration and apply command-line overrides.

    Raises:
        ConfigurationError: If the config file is missing or invalid
    """
    if args.config is not None:
        config = load_config(args.config)
    else:
        config = RunConfig(tileset=args.tileset)

    overrides = {}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    if args.seed is not None:
        overrides["seed"] = args.seed
    elif config.seed is None and os.environ.get("TILECOLLAPSE_SEED"):
        overrides["seed"] = int(os.environ["TILECOLLAPSE_SEED"])
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.full_propagation:
        overrides["propagation"] = Propagation.FULL

    if not overrides:
        return config
    return RunConfig.model_validate(config.model_dump() | overrides)


def run_generate(
    console: Console,
    config: RunConfig,
    catalog: TileCatalog,
    styles: dict[str, TileStyle],
) -> int:
    """Generate a full grid with restarts and print it.

    Returns:
        Exit code
    """
    from tqdm import tqdm

    total = config.width * config.height
    pbar = tqdm(total=total, desc="  Collapsing", unit="cells", leave=False)
    last_progress = [0]

    def update_progress(current: int, total_cells: int) -> None:
        # current drops back to 1 when an attempt restarts
        if current < last_progress[0]:
            pbar.reset(total=total_cells)
            last_progress[0] = 0
        delta = current - last_progress[0]
        if delta > 0:
            pbar.update(delta)
            last_progress[0] = current

    try:
        grid = generate_tiles(
            catalog,
            config.width,
            config.height,
            seed=config.seed,
            max_retries=config.max_retries,
            propagation=config.propagation,
            progress_callback=update_progress,
        )
    finally:
        pbar.close()

    console.print(render_grid(grid, styles))
    return 0


def run_stepper(
    console: Console,
    config: RunConfig,
    catalog: TileCatalog,
    styles: dict[str, TileStyle],
) -> int:
    """Collapse one cell at a time, printing every event, then the grid.

    Returns:
        Exit code
    """
    stepper = Stepper(
        config.width,
        config.height,
        catalog,
        seed=config.seed,
        propagation=config.propagation,
    )

    try:
        while not stepper.is_complete():
            console.print(render_event(stepper.step(), styles))
    except ContradictionError:
        console.print(render_grid(stepper.grid, styles))
        raise

    console.print()
    console.print(render_grid(stepper.grid, styles))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for tilecollapse."""
    # Load environment variables first
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="tilecollapse - Wave Function Collapse tile generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tilecollapse                          # 16x16 roads
  tilecollapse --tileset terrain --seed 3
  tilecollapse --config run.yaml        # Tiles from a YAML file
  tilecollapse --step --width 4 --height 3
        """,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML run configuration (tiles, size, seed)",
    )
    parser.add_argument(
        "--tileset",
        choices=sorted(TILESETS),
        default="roads",
        help="Built-in tileset when no --config is given (default: roads)",
    )
    parser.add_argument("--width", type=int, help="Grid width in cells")
    parser.add_argument("--height", type=int, help="Grid height in cells")
    parser.add_argument("--seed", type=int, help="Random seed (default: $TILECOLLAPSE_SEED)")
    parser.add_argument("--max-retries", type=int, help="Restarts allowed after a contradiction")
    parser.add_argument(
        "--step",
        action="store_true",
        help="Collapse one cell at a time and print each step (no restarts)",
    )
    parser.add_argument(
        "--full-propagation",
        action="store_true",
        help="Propagate constraints beyond direct neighbors",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path(os.environ.get("TILECOLLAPSE_LOG_DIR", "logs")),
        help="Directory for debug.log (default: $TILECOLLAPSE_LOG_DIR or logs/)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to console",
    )

    args = parser.parse_args(argv)

    console_level = logging.DEBUG if args.debug else logging.WARNING
    log_path = setup_logging(args.log_dir, console_level=console_level)

    console = Console()
    console.print(f"tilecollapse v{__version__}")
    console.print(f"Log file: {log_path}")
    console.print()

    try:
        config = build_config(args)
        catalog = config.build_catalog()
        styles = config.styles()
        logger.info(
            f"Run | {config.width}x{config.height} | tiles={len(catalog)} | "
            f"scheme={catalog.scheme.value} | seed={config.seed} | "
            f"propagation={config.propagation.value}"
        )

        if args.step:
            return run_stepper(console, config, catalog, styles)
        return run_generate(console, config, catalog, styles)

    except (WFCError, GenerationError, ValueError) as e:
        # ValueError covers overrides that fail RunConfig validation
        logger.error(f"Run failed: {e}")
        console.print(Text.assemble(("Error: ", "bold red"), str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
