"""
Vector image serialization.

Drawable primitives are plain dataclasses; `SvgDocument` collects them
with a `<defs>` block and serializes through ElementTree.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

SVG_NS = "http://www.w3.org/2000/svg"
DOCTYPE = "<!DOCTYPE svg>"


def _num(value: float) -> str:
    """Compact number formatting: integers without a decimal part."""
    value = round(float(value), 2)
    if value == int(value):
        return str(int(value))
    return str(value)


@dataclass
class PolygonShape:
    points: Sequence[Tuple[float, float]]
    fill: str = ""

    def to_element(self) -> ET.Element:
        el = ET.Element("polygon", points=" ".join(f"{_num(x)},{_num(y)}" for x, y in self.points))
        if self.fill:
            el.set("style", f"fill:{self.fill};")
        return el


@dataclass
class CircleShape:
    cx: float
    cy: float
    radius: float
    stroke: str = ""
    stroke_width: Optional[float] = None
    stroke_opacity: float = 1.0
    fill: str = ""
    fill_opacity: float = 1.0

    def to_element(self) -> ET.Element:
        el = ET.Element("circle", cx=_num(self.cx), cy=_num(self.cy), r=_num(self.radius))
        if self.stroke:
            el.set("stroke", self.stroke)
        if self.stroke_width is not None:
            el.set("stroke-width", _num(self.stroke_width))
        if self.stroke_opacity < 1:
            el.set("stroke-opacity", _num(self.stroke_opacity))
        if self.fill:
            el.set("fill", self.fill)
        if self.fill_opacity < 1:
            el.set("fill-opacity", _num(self.fill_opacity))
        return el


@dataclass
class LineShape:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "black"
    width: float = 1.0

    def to_element(self) -> ET.Element:
        return ET.Element(
            "line",
            x1=_num(self.x1), y1=_num(self.y1), x2=_num(self.x2), y2=_num(self.y2),
            stroke=self.color,
            **{"stroke-width": _num(self.width)},
        )


@dataclass
class LinearGradient:
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    stops: List[Tuple[float, str]] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"url(#{self.id})"

    def to_element(self) -> ET.Element:
        el = ET.Element(
            "linearGradient",
            id=self.id,
            gradientUnits="userSpaceOnUse",
            x1=_num(self.x1), y1=_num(self.y1), x2=_num(self.x2), y2=_num(self.y2),
        )
        for offset, color in self.stops:
            ET.SubElement(el, "stop", offset=_num(offset), **{"stop-color": color})
        return el


Shape = Union[PolygonShape, CircleShape, LineShape]


class SvgDocument:
    """An SVG canvas holding gradient definitions and drawable shapes."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.defs: List[LinearGradient] = []
        self.shapes: List[Shape] = []

    def add(self, shape: Shape) -> Shape:
        self.shapes.append(shape)
        return shape

    def define(self, gradient: LinearGradient) -> LinearGradient:
        self.defs.append(gradient)
        return gradient

    def to_element(self) -> ET.Element:
        root = ET.Element("svg", xmlns=SVG_NS, height=_num(self.height), width=_num(self.width))
        if self.defs:
            defs = ET.SubElement(root, "defs")
            for gradient in self.defs:
                defs.append(gradient.to_element())
        for shape in self.shapes:
            root.append(shape.to_element())
        return root

    def to_string(self) -> str:
        root = self.to_element()
        ET.indent(root, space="")
        return f"{DOCTYPE}\n{ET.tostring(root, encoding='unicode')}\n"

    def write(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_string(), encoding="utf-8")
        return path
