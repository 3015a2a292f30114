"""SVG 绘制表面，输出确定性的矢量文本。"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
SVG_PROLOG = '<?xml version="1.0" standalone="no"?>'
DEFAULT_SVG_SIZE = 500


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


def _escape(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;")


class SvgSurface:
    """收集绘制指令并生成 SVG 文本。"""

    def __init__(self, width: int = DEFAULT_SVG_SIZE, height: int = DEFAULT_SVG_SIZE) -> None:
        self.width = width
        self.height = height
        self._elements: list[str] = []

    def __len__(self) -> int:
        return len(self._elements)

    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: str = "black", width: float = 2) -> None:
        self._elements.append(
            f'<line x1="{_fmt(x1)}" y1="{_fmt(y1)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}" '
            f'stroke="{_escape(stroke)}" stroke-width="{_fmt(width)}" stroke-linecap="round"/>'
        )

    def rect(self, x: float, y: float, width: float, height: float, fill: str, css_class: Optional[str] = None) -> None:
        class_attr = f' class="{_escape(css_class)}"' if css_class else ""
        self._elements.append(
            f'<rect{class_attr} x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(width)}" height="{_fmt(height)}" '
            f'fill="{_escape(fill)}"/>'
        )

    def circle(self, cx: float, cy: float, r: float, fill: str, css_class: Optional[str] = None) -> None:
        class_attr = f' class="{_escape(css_class)}"' if css_class else ""
        self._elements.append(
            f'<circle{class_attr} cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(r)}" fill="{_escape(fill)}"/>'
        )

    def polyline(
        self,
        points: Iterable[Tuple[float, float]],
        stroke: str,
        width: float = 3,
        css_class: Optional[str] = None,
    ) -> None:
        class_attr = f' class="{_escape(css_class)}"' if css_class else ""
        coords = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in points)
        self._elements.append(
            f'<polyline{class_attr} points="{coords}" fill="none" stroke="{_escape(stroke)}" '
            f'stroke-width="{_fmt(width)}" stroke-linejoin="round"/>'
        )

    def to_markup(self) -> str:
        """返回带 XML 声明的完整 SVG 文本。"""

        body = "".join(self._elements)
        return (
            f'{SVG_PROLOG}<svg xmlns="{SVG_NAMESPACE}" width="{self.width}" height="{self.height}">'
            f"{body}</svg>"
        )
