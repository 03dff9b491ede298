"""
Command line entry point.

Generates one tessellation, optionally audits it and writes the SVG.
Defaults come from `config.settings` (TESSELLATOR_* environment variables
or a .env file); flags override them for a single run.
"""

import argparse
import logging
import sys
import uuid
from typing import List, Optional

import structlog

from .config import Settings, settings as default_settings
from .core.disk_graph import TessellationError
from .core.mesh_analysis import summarize, validate
from .core.tessellation import generate_tessellation
from .render.coloring import ColorMode
from .render.scene import build_document

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def configure_logging(level: str = "INFO", fmt: str = "plain") -> None:
    """Route structlog through the stdlib root logger."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-tessellator",
        description="Generate a circle-packing triangulation as SVG",
    )
    parser.add_argument("--seed", default=settings.seed, help="PRNG seed (random if not specified)")
    parser.add_argument("--width", type=float, default=settings.canvas_width, help="Canvas width")
    parser.add_argument("--height", type=float, default=settings.canvas_height, help="Canvas height")
    parser.add_argument("--min-radius", type=float, default=settings.min_radius, help="Minimum disk radius")
    parser.add_argument("--max-radius", type=float, default=settings.max_radius, help="Maximum disk radius")
    parser.add_argument(
        "--retry-budget", type=int, default=settings.retry_budget,
        help="Times a blocked frontier edge is requeued before it is declared dead",
    )
    parser.add_argument("--output", "-o", default=settings.output_path, help="SVG output path")
    parser.add_argument(
        "--color-mode",
        choices=[mode.value for mode in ColorMode],
        default=ColorMode(settings.color_mode).value,
        help="Triangle fill mode",
    )
    parser.add_argument(
        "--no-circles", dest="draw_circles", action="store_false", default=settings.draw_circles,
        help="Do not outline disks",
    )
    parser.add_argument(
        "--no-loops", dest="draw_loops", action="store_false", default=settings.draw_loops,
        help="Do not draw dead-edge loops",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Audit the mesh and exit with status 2 on any violation",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--log-format", choices=["plain", "json"], default=settings.log_format, help="Logging format"
    )
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    settings = settings or default_settings
    args = build_parser(settings).parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    seed = args.seed
    if seed is None:
        seed = uuid.uuid4().hex[:12]
        logger.info("No seed given, generated one", seed=seed)

    try:
        run_settings = settings.model_copy(update={
            "canvas_width": args.width,
            "canvas_height": args.height,
            "min_radius": args.min_radius,
            "max_radius": args.max_radius,
            "retry_budget": args.retry_budget,
        })
        config = run_settings.tessellation_config()
    except ValueError as e:
        logger.error("Invalid configuration", error=str(e))
        return EXIT_FAILED

    try:
        tessellation = generate_tessellation(config, seed=seed)
    except TessellationError as e:
        logger.error("Tessellation failed", seed=seed, error=str(e))
        return EXIT_FAILED

    logger.info("Tessellation summary", **summarize(tessellation))

    if args.validate:
        problems = validate(tessellation)
        for problem in problems:
            logger.error("Mesh violation", seed=seed, problem=problem)
        if problems:
            return EXIT_INVALID

    document = build_document(
        tessellation,
        color_mode=ColorMode(args.color_mode),
        draw_circles=args.draw_circles,
        draw_loops=args.draw_loops,
    )
    path = document.write(args.output)
    logger.info("SVG written", path=str(path), seed=seed)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
