"""Builds the SVG document for a finished tessellation."""

from typing import Optional

import structlog

from ..core.alea_prng import AleaPRNG
from ..core.tessellation import Tessellation
from ..utils.random import get_prng
from .coloring import ColorMode, NoisePalette, to_hsl
from .svg import CircleShape, LinearGradient, LineShape, PolygonShape, SvgDocument

logger = structlog.get_logger()

DEBUG_STROKE_WIDTH = 2
OPEN_EDGE_COLOR = "grey"


def build_document(
    tessellation: Tessellation,
    prng: Optional[AleaPRNG] = None,
    color_mode: ColorMode = ColorMode.NOISE,
    draw_circles: bool = True,
    draw_loops: bool = True,
) -> SvgDocument:
    """
    Render triangles plus optional debug overlays.

    Args:
        tessellation: Finished tessellation
        prng: Random stream for the noise field and loop colors
        color_mode: Flat noise fills or per-triangle gradients
        draw_circles: Outline every placed disk
        draw_loops: Draw closed dead-edge loops and unclosed dead edges

    Returns:
        SvgDocument sized to the canvas
    """
    prng = prng or get_prng()
    config = tessellation.config
    doc = SvgDocument(config.canvas_width, config.canvas_height)
    palette = NoisePalette(config.canvas_width, config.canvas_height, prng)
    coords = tessellation.triangle_coordinates()

    if ColorMode(color_mode) is ColorMode.GRADIENT:
        for i, (points, fill) in enumerate(zip(coords, palette.triangle_gradients(tessellation))):
            gradient = doc.define(LinearGradient(
                id=f"tri{i}",
                x1=fill.start[0], y1=fill.start[1],
                x2=fill.end[0], y2=fill.end[1],
                stops=[(0, fill.start_color), (1, fill.end_color)],
            ))
            doc.add(PolygonShape(points=points.tolist(), fill=gradient.url))
    else:
        for points, color in zip(coords, palette.triangle_colors(tessellation)):
            doc.add(PolygonShape(points=points.tolist(), fill=color))

    if draw_circles:
        for disk in tessellation.graph:
            doc.add(CircleShape(
                disk.x, disk.y, disk.radius,
                stroke="black", stroke_width=DEBUG_STROKE_WIDTH, fill_opacity=0,
            ))

    if draw_loops:
        for segments in tessellation.loop_segments():
            color = to_hsl(prng.uniform(0, 360), 100, 60)
            for (x1, y1), (x2, y2) in segments:
                doc.add(LineShape(x1, y1, x2, y2, color=color, width=DEBUG_STROKE_WIDTH))
        for (x1, y1), (x2, y2) in tessellation.open_segments():
            doc.add(LineShape(x1, y1, x2, y2, color=OPEN_EDGE_COLOR, width=DEBUG_STROKE_WIDTH))

    logger.info(
        "SVG document built",
        polygons=len(coords),
        gradients=len(doc.defs),
        shapes=len(doc.shapes),
    )
    return doc
