"""
Data models for the diagram editor.

This module contains the enumerations and dataclasses shared by the diagram
store, the stacking engine and the interaction layer. Boxes and connections
refer to each other by id only; the store owns every instance.

Classes:
    BoxType: Closed set of box types, each with its own bump layout.
    BumpKind: Classification of a bump (which edge it sits on).
    LineEnd: Which end of a connection is being addressed.
    Tool: Toolbar tools that can be armed.
    Box: A box placed on the canvas, with its stacking links.
    Connection: A directed line between two bumps.
    BumpSpec: Static definition of a bump in a type's layout table.
    Bump: A bump resolved to absolute canvas coordinates.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class DiagramError(Exception):
    """Raised when a store operation references missing or invalid state."""

    pass


class BoxType(Enum):
    """Box types. The value is the number shown on the toolbar."""

    T1 = 1
    T2 = 2
    T3 = 3


class BumpKind(Enum):
    """Which edge of a box a bump sits on."""

    TOP = "top"
    BOTTOM = "bottom"
    RIGHT = "right"


class LineEnd(Enum):
    """An end of a connection."""

    FROM = "from"
    TO = "to"

    @property
    def other(self) -> "LineEnd":
        return LineEnd.TO if self is LineEnd.FROM else LineEnd.FROM


class Tool(Enum):
    """Toolbar tools."""

    BOX = "box"
    LINE = "line"


@dataclass
class Box:
    """
    A box on the canvas.

    Attributes:
        id: Stable identity, unique within a diagram.
        x: Left edge x-coordinate.
        y: Top edge y-coordinate.
        width: Box width (fixed at creation).
        height: Box height (fixed at creation).
        type: Box type, selects the bump layout.
        parent: Id of the box this one is stacked under, if any.
        child: Id of the box stacked under this one, if any.
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    type: BoxType
    parent: Optional[str] = None
    child: Optional[str] = None

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class Connection:
    """
    A directed line from one box's bump to another box's bump.

    Attributes:
        id: Stable identity, shown as the line's label.
        from_box: Id of the source box.
        from_bump: Bump name on the source box.
        to_box: Id of the target box.
        to_bump: Bump name on the target box.
    """

    id: str
    from_box: str
    from_bump: str
    to_box: str
    to_bump: str

    def box_at(self, end: LineEnd) -> str:
        return self.from_box if end is LineEnd.FROM else self.to_box

    def bump_at(self, end: LineEnd) -> str:
        return self.from_bump if end is LineEnd.FROM else self.to_bump

    def touches(self, box_id: str) -> bool:
        return self.from_box == box_id or self.to_box == box_id


@dataclass(frozen=True)
class BumpSpec:
    """
    Static bump definition.

    Attributes:
        id: Bump name, e.g. "top-left".
        kind: Edge classification.
        anchor: Offset from the box's top-left corner as fractions of
            (width, height).
    """

    id: str
    kind: BumpKind
    anchor: Tuple[float, float]


@dataclass(frozen=True)
class Bump:
    """A bump resolved against a concrete box position."""

    id: str
    kind: BumpKind
    x: float
    y: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)
