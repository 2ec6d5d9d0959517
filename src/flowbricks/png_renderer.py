"""
PNG renderer for editor diagrams.

Draws the current state of a Diagram with Pillow: boxes labelled with their
ids, bumps as semicircles facing out of their edge, and connections as
straight arrows with a round tail. Committed connections carry their id on
an opaque label at the midpoint; transient lines (a line being drawn or an
endpoint being dragged) are drawn without a label.
"""

import logging
import math
import os
from typing import TYPE_CHECKING, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .bumps import get_bumps
from .constants import BUMP_RADIUS
from .geometry import Point, midpoint
from .models import Box, BumpKind

if TYPE_CHECKING:
    from .diagram import Diagram
    from .interaction import TransientLine

logger = logging.getLogger(__name__)

# Start angle (radians, y axis pointing down) of each bump's half circle
_BUMP_START_ANGLES = {
    BumpKind.TOP: math.pi,
    BumpKind.BOTTOM: 0.0,
    BumpKind.RIGHT: -math.pi / 2,
}


class DiagramRenderer:
    """Renders diagrams as PNG images."""

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        scale: int = 2,  # For high-resolution output
        font_size: int = 14,
        label_font_size: int = 12,
        font_path: Optional[str] = None,
        bump_radius: float = BUMP_RADIUS,
        tail_radius: float = 5,
        arrow_size: float = 12,
        label_padding: int = 4,
    ):
        self.width = width
        self.height = height
        self.scale = scale
        self.font_size = font_size
        self.label_font_size = label_font_size
        self.font_path = font_path
        self.bump_radius = bump_radius
        self.tail_radius = tail_radius
        self.arrow_size = arrow_size
        self.label_padding = label_padding

        # Colors
        self.bg_color = (255, 255, 255)
        self.box_fill = (255, 255, 255)
        self.box_outline = (0, 0, 0)
        self.text_color = (0, 0, 0)
        self.line_color = (0, 0, 0)

        self._fonts = {}

    def _get_font(self, size: int) -> ImageFont.FreeTypeFont:
        """Get a font of the given (unscaled) size."""
        if size in self._fonts:
            return self._fonts[size]

        font_size = size * self.scale
        font_options = []
        if self.font_path:
            if os.path.exists(self.font_path):
                font_options.append(self.font_path)
            else:
                logger.warning("Font %s not found, using a system font", self.font_path)
        font_options.extend(
            [
                "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
                "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
                "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
            ]
        )

        for path in font_options:
            if os.path.exists(path):
                try:
                    self._fonts[size] = ImageFont.truetype(path, font_size)
                    return self._fonts[size]
                except OSError:
                    continue

        # Fallback to Pillow's default font
        try:
            self._fonts[size] = ImageFont.load_default(size=font_size)
        except TypeError:
            # Older Pillow versions don't support size parameter
            self._fonts[size] = ImageFont.load_default()
        return self._fonts[size]

    def _s(self, point: Point) -> Tuple[float, float]:
        return (point[0] * self.scale, point[1] * self.scale)

    def render_image(
        self, diagram: "Diagram", transient: Optional["TransientLine"] = None
    ) -> Image.Image:
        """
        Draw the diagram onto a new image.

        Args:
            diagram: Diagram to draw.
            transient: In-progress line, if the editor has one. When it
                belongs to an existing connection, that connection is drawn
                only as the transient line.

        Returns:
            The rendered image.
        """
        img = Image.new(
            "RGB", (self.width * self.scale, self.height * self.scale), self.bg_color
        )
        draw = ImageDraw.Draw(img)

        rerouted = transient.connection_id if transient else None
        for conn in diagram.connections:
            if conn.id == rerouted:
                continue
            endpoints = diagram.connection_endpoints(conn)
            if endpoints is None:
                continue
            self._draw_line(draw, endpoints[0], endpoints[1], label=conn.id)

        if transient is not None:
            self._draw_line(draw, transient.start, transient.end, label=None)

        # Boxes go on top so bumps cover line tails
        for box in diagram.boxes:
            self._draw_box(draw, box)

        return img

    def render(
        self,
        diagram: "Diagram",
        transient: Optional["TransientLine"] = None,
        output_path: str = "diagram.png",
    ) -> str:
        """
        Render the diagram as a PNG file.

        Returns:
            Path to the saved PNG file
        """
        img = self.render_image(diagram, transient)
        img.save(output_path, "PNG")
        logger.info("Rendered %d box(es) to %s", len(diagram.boxes), output_path)
        return output_path

    def _draw_box(self, draw: ImageDraw.ImageDraw, box: Box):
        """Draw a box with its bumps and id."""
        line_width = max(1, 2 * self.scale)
        x0, y0 = self._s((box.x, box.y))
        x1, y1 = self._s((box.x + box.width, box.bottom))
        draw.rectangle(
            [x0, y0, x1, y1],
            fill=self.box_fill,
            outline=self.box_outline,
            width=line_width,
        )

        for bump in get_bumps(box):
            self._draw_bump(draw, bump.position, bump.kind)

        font = self._get_font(self.font_size)
        center = self._s((box.center_x, box.y + box.height / 2))
        origin, _ = self._text_origin(draw, center, box.id, font)
        draw.text(origin, box.id, fill=self.text_color, font=font)

    def _semicircle(self, center: Point, kind: BumpKind, steps: int = 16) -> List[Tuple[float, float]]:
        cx, cy = self._s(center)
        r = self.bump_radius * self.scale
        start = _BUMP_START_ANGLES[kind]
        return [
            (cx + r * math.cos(start + math.pi * i / steps),
             cy + r * math.sin(start + math.pi * i / steps))
            for i in range(steps + 1)
        ]

    def _draw_bump(self, draw: ImageDraw.ImageDraw, anchor: Point, kind: BumpKind):
        draw.polygon(
            self._semicircle(anchor, kind),
            fill=self.box_fill,
            outline=self.box_outline,
            width=max(1, 2 * self.scale),
        )

    def _draw_line(
        self,
        draw: ImageDraw.ImageDraw,
        start: Point,
        end: Point,
        label: Optional[str],
    ):
        """Draw an arrow from start to end, with an optional midpoint label."""
        line_width = max(1, 2 * self.scale)
        p1 = self._s(start)
        p2 = self._s(end)
        draw.line([p1, p2], fill=self.line_color, width=line_width)

        # Tail circle
        r = self.tail_radius * self.scale
        draw.ellipse(
            [p1[0] - r, p1[1] - r, p1[0] + r, p1[1] + r],
            fill=self.bg_color,
            outline=self.line_color,
            width=line_width,
        )

        self._draw_arrowhead(draw, p1, p2)

        if label:
            self._draw_label(draw, self._s(midpoint(start, end)), label)

    def _draw_arrowhead(
        self,
        draw: ImageDraw.ImageDraw,
        from_point: Tuple[float, float],
        to_point: Tuple[float, float],
    ):
        """Draw an arrowhead at the end of a line."""
        x1, y1 = from_point
        x2, y2 = to_point

        size = self.arrow_size * self.scale
        angle = math.atan2(y2 - y1, x2 - x1)

        ax1 = x2 - size * math.cos(angle - math.pi / 6)
        ay1 = y2 - size * math.sin(angle - math.pi / 6)
        ax2 = x2 - size * math.cos(angle + math.pi / 6)
        ay2 = y2 - size * math.sin(angle + math.pi / 6)

        draw.polygon([(x2, y2), (ax1, ay1), (ax2, ay2)], fill=self.line_color)

    def _text_origin(
        self, draw: ImageDraw.ImageDraw, center: Tuple[float, float], text: str, font
    ) -> Tuple[Tuple[float, float], Tuple[float, float, float, float]]:
        """Origin that centers ``text`` on ``center``, and the resulting bbox."""
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        w = right - left
        h = bottom - top
        x = center[0] - w / 2 - left
        y = center[1] - h / 2 - top
        return (x, y), (x + left, y + top, x + right, y + bottom)

    def _draw_label(self, draw: ImageDraw.ImageDraw, center: Tuple[float, float], text: str):
        font = self._get_font(self.label_font_size)
        origin, bbox = self._text_origin(draw, center, text, font)
        pad = self.label_padding * self.scale
        draw.rectangle(
            [bbox[0] - pad, bbox[1] - pad, bbox[2] + pad, bbox[3] + pad],
            fill=self.bg_color,
        )
        draw.text(origin, text, fill=self.text_color, font=font)


def render_to_png(
    diagram: "Diagram",
    output_path: str = "diagram.png",
    transient: Optional["TransientLine"] = None,
    **kwargs,
) -> str:
    """
    Convenience function to render a diagram to PNG.

    Args:
        diagram: Diagram to draw
        output_path: Path to save the PNG file
        transient: Optional in-progress line
        **kwargs: Additional parameters for DiagramRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = DiagramRenderer(**kwargs)
    return renderer.render(diagram, transient, output_path)
