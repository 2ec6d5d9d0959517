"""
Interaction state machine for the diagram editor.

DiagramEditor consumes pointer events and toolbar/menu commands and turns
them into mutations of a Diagram. Exactly one interaction state is active
at a time:

- Idle: nothing in progress.
- ToolArmed: a toolbar tool is selected and waiting for a press.
- DraggingStack: a drag unit follows the pointer.
- DraggingLineEnd: one end of an existing connection follows the pointer.
- PendingConnection: a new line is being drawn from a bump.

Releasing the pointer always ends a drag or a pending line and returns to
Idle, committing whatever the release position allows. Gestures that
cannot be honoured (self-connections, unavailable bumps, releasing over
empty canvas) leave the diagram untouched.

Example:
    >>> editor = DiagramEditor()
    >>> state = editor.select_tool(Tool.BOX, BoxType.T2)
    >>> state = editor.click(100, 100)
    >>> editor.diagram.boxes[0].id
    'B0'
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .bumps import nearest_available_bump
from .constants import (
    ALIGN_TOLERANCE,
    LINE_END_HIT_RADIUS,
    LINE_HIT_DISTANCE,
    SNAP_THRESHOLD,
)
from .diagram import Diagram
from .export import DiagramExporter
from .geometry import Point
from .models import BoxType, LineEnd, Tool
from .png_renderer import DiagramRenderer
from .stacking import StackingEngine

logger = logging.getLogger(__name__)


class Cursor(Enum):
    """Pointer cursor hint for the host UI."""

    DEFAULT = "default"
    CROSSHAIR = "crosshair"
    POINTER = "pointer"
    MOVE = "move"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ToolArmed:
    tool: Tool
    box_type: Optional[BoxType] = None


@dataclass(frozen=True)
class DraggingStack:
    unit: Tuple[str, ...]
    offset: Point  # grab point relative to the unit's top-left corner


@dataclass(frozen=True)
class DraggingLineEnd:
    connection_id: str
    end: LineEnd
    pointer: Point


@dataclass(frozen=True)
class PendingConnection:
    box_id: str
    bump_id: str
    pointer: Point


InteractionState = Union[Idle, ToolArmed, DraggingStack, DraggingLineEnd, PendingConnection]


@dataclass(frozen=True)
class TransientLine:
    """
    An in-progress line for the renderer.

    Attributes:
        start: Tail position.
        end: Arrowhead position.
        connection_id: Id of the connection whose end is being dragged, or
            None for a line that is still being drawn.
    """

    start: Point
    end: Point
    connection_id: Optional[str] = None


class MenuAction(Enum):
    """Context menu actions."""

    DELETE_LINE = "delete-line"
    DELETE_BOX = "delete-box"
    DELETE_BOX_AND_BELOW = "delete-box-and-below"

    @property
    def label(self) -> str:
        return {
            MenuAction.DELETE_LINE: "Delete line",
            MenuAction.DELETE_BOX: "Delete box",
            MenuAction.DELETE_BOX_AND_BELOW: "Delete box and below",
        }[self]


@dataclass(frozen=True)
class ContextMenu:
    """The entity under the cursor and the actions offered for it."""

    target_kind: str  # "line" or "box"
    target_id: str
    actions: Tuple[MenuAction, ...]


class DiagramEditor:
    """Drives a Diagram from pointer events, toolbar and menu commands."""

    def __init__(
        self,
        diagram: Optional[Diagram] = None,
        snap_threshold: float = SNAP_THRESHOLD,
        align_tolerance: float = ALIGN_TOLERANCE,
        line_end_hit_radius: float = LINE_END_HIT_RADIUS,
        line_hit_distance: float = LINE_HIT_DISTANCE,
    ):
        self.diagram = diagram if diagram is not None else Diagram()
        self.stacking = StackingEngine(
            self.diagram,
            snap_threshold=snap_threshold,
            align_tolerance=align_tolerance,
        )
        self.line_end_hit_radius = line_end_hit_radius
        self.line_hit_distance = line_hit_distance
        self.exporter = DiagramExporter()

        self.state: InteractionState = Idle()
        self.cursor = Cursor.DEFAULT

    # --- Toolbar ---

    def select_tool(
        self, tool: Union[Tool, str], box_type: Union[BoxType, int, None] = None
    ) -> InteractionState:
        """
        Arm a toolbar tool.

        Args:
            tool: Tool.BOX or Tool.LINE (or their string values).
            box_type: Type of box to place; required for the box tool.

        Raises:
            ValueError: If the box tool is selected without a box type, or
                the tool or box type is unknown.
        """
        tool = Tool(tool)
        if tool is Tool.BOX:
            if box_type is None:
                raise ValueError("The box tool needs a box type")
            self.state = ToolArmed(tool, BoxType(box_type))
            self.cursor = Cursor.CROSSHAIR
        else:
            self.state = ToolArmed(tool)
            self.cursor = Cursor.DEFAULT
        return self.state

    def _reset(self) -> None:
        self.state = Idle()
        self.cursor = Cursor.DEFAULT

    # --- Pointer events ---

    def pointer_down(self, x: float, y: float) -> InteractionState:
        point = (x, y)
        state = self.state

        if isinstance(state, ToolArmed):
            if state.tool is Tool.BOX:
                self.diagram.create_box(x, y, state.box_type)
                self._reset()
            else:
                self._start_connection(point)
            return self.state

        if not isinstance(state, Idle):
            logger.debug("Ignoring press while %s", type(state).__name__)
            return state

        hit = self.diagram.find_line_end_at(point, self.line_end_hit_radius)
        if hit is not None:
            conn, end = hit
            self.state = DraggingLineEnd(conn.id, end, point)
            self.cursor = Cursor.MOVE
            return self.state

        box = self.diagram.find_box_at(point)
        if box is not None:
            unit = self.stacking.begin_drag(box.id)
            self.state = DraggingStack(tuple(unit), (x - box.x, y - box.y))
            self.cursor = Cursor.MOVE
        return self.state

    def _start_connection(self, point: Point) -> None:
        box = self.diagram.find_box_at(point, self.diagram.bump_radius)
        if box is None:
            return
        bump = nearest_available_bump(box, point)
        if bump is None:
            logger.debug("No free bump on %s to start a line", box.id)
            return
        self.state = PendingConnection(box.id, bump.id, point)

    def pointer_move(self, x: float, y: float) -> InteractionState:
        point = (x, y)
        state = self.state

        if isinstance(state, DraggingStack):
            if any(self.diagram.box_by_id(box_id) is None for box_id in state.unit):
                logger.debug("Dragged boxes were deleted, ending the drag")
                self._reset()
                return self.state
            top = self.diagram.box_by_id(state.unit[0])
            dx = x - state.offset[0] - top.x
            dy = y - state.offset[1] - top.y
            self.stacking.move(list(state.unit), dx, dy)
        elif isinstance(state, (DraggingLineEnd, PendingConnection)):
            self.state = replace(state, pointer=point)
        elif isinstance(state, Idle):
            self.cursor = self._hover_cursor(point)
        return self.state

    def _hover_cursor(self, point: Point) -> Cursor:
        if self.diagram.find_line_end_at(point, self.line_end_hit_radius):
            return Cursor.POINTER
        if self.diagram.find_box_at(point):
            return Cursor.MOVE
        return Cursor.DEFAULT

    def pointer_up(self, x: float, y: float) -> InteractionState:
        point = (x, y)
        state = self.state

        if isinstance(state, DraggingStack):
            self.stacking.try_snap(list(state.unit))
        elif isinstance(state, DraggingLineEnd):
            self._finish_line_end(state, point)
        elif isinstance(state, PendingConnection):
            self._finish_connection(state, point)
        else:
            return state

        self._reset()
        return self.state

    def click(self, x: float, y: float) -> InteractionState:
        """Press and release at the same point."""
        self.pointer_down(x, y)
        return self.pointer_up(x, y)

    def drag(self, start: Point, end: Point) -> InteractionState:
        """Press at ``start``, move to ``end`` and release there."""
        self.pointer_down(*start)
        self.pointer_move(*end)
        return self.pointer_up(*end)

    def _finish_line_end(self, state: DraggingLineEnd, point: Point) -> None:
        conn = self.diagram.connection_by_id(state.connection_id)
        if conn is None:
            return
        box = self.diagram.find_box_at(point, self.diagram.bump_radius)
        if box is None:
            logger.debug("Released end of %s over empty canvas", conn.id)
            return
        if box.id == conn.box_at(state.end.other):
            logger.debug("Rejected self-connection for %s", conn.id)
            return
        bump = nearest_available_bump(box, point)
        if bump is None:
            logger.debug("No free bump on %s for %s", box.id, conn.id)
            return
        self.diagram.reconnect(conn.id, state.end, box.id, bump.id)

    def _finish_connection(self, state: PendingConnection, point: Point) -> None:
        if self.diagram.box_by_id(state.box_id) is None:
            return
        box = self.diagram.find_box_at(point, self.diagram.bump_radius)
        if box is None:
            return
        if box.id == state.box_id:
            logger.debug("Rejected self-connection on %s", box.id)
            return
        bump = nearest_available_bump(box, point)
        if bump is None:
            logger.debug("No free bump on %s to end a line", box.id)
            return
        self.diagram.create_connection(state.box_id, state.bump_id, box.id, bump.id)

    # --- Render support ---

    def transient_line(self) -> Optional[TransientLine]:
        """The line currently being drawn or re-routed, if any."""
        state = self.state
        if isinstance(state, PendingConnection):
            start = self.diagram.tip_position(state.box_id, state.bump_id)
            if start is None:
                return None
            return TransientLine(start, state.pointer)

        if isinstance(state, DraggingLineEnd):
            conn = self.diagram.connection_by_id(state.connection_id)
            if conn is None:
                return None
            fixed_end = state.end.other
            fixed = self.diagram.tip_position(conn.box_at(fixed_end), conn.bump_at(fixed_end))
            if fixed is None:
                return None
            if state.end is LineEnd.FROM:
                return TransientLine(state.pointer, fixed, conn.id)
            return TransientLine(fixed, state.pointer, conn.id)

        return None

    def render(self, output_path: str = "diagram.png", **kwargs) -> str:
        """Render the diagram, including any transient line, to a PNG."""
        renderer = DiagramRenderer(**kwargs)
        return renderer.render(self.diagram, self.transient_line(), output_path)

    # --- Context menu ---

    def context_menu_at(self, x: float, y: float) -> Optional[ContextMenu]:
        """
        Resolve the entity under the cursor for a context menu.

        Lines take priority over boxes. A lone box offers a plain delete; a
        box in a stack also offers deleting everything below it. No menu is
        offered while a drag or a pending line is in progress.
        """
        if not isinstance(self.state, (Idle, ToolArmed)):
            return None

        point = (x, y)
        conn = self.diagram.find_connection_at(point, self.line_hit_distance)
        if conn is not None:
            return ContextMenu("line", conn.id, (MenuAction.DELETE_LINE,))

        box = self.diagram.find_box_at(point)
        if box is None:
            return None
        if self.diagram.is_stacked(box.id):
            actions = (MenuAction.DELETE_BOX, MenuAction.DELETE_BOX_AND_BELOW)
        else:
            actions = (MenuAction.DELETE_BOX,)
        return ContextMenu("box", box.id, actions)

    def perform(self, menu: ContextMenu, action: Union[MenuAction, str]) -> List[str]:
        """
        Run a context menu action.

        Returns:
            Ids of the deleted entities; empty if the target no longer exists.

        Raises:
            ValueError: If the menu did not offer the action.
        """
        action = MenuAction(action)
        if action not in menu.actions:
            raise ValueError(f"{action.value!r} is not offered for {menu.target_id}")

        if action is MenuAction.DELETE_LINE:
            removed = self.diagram.delete_connection(menu.target_id)
            return [menu.target_id] if removed else []
        return self.diagram.delete_box(
            menu.target_id,
            include_descendants=action is MenuAction.DELETE_BOX_AND_BELOW,
        )

    # --- Export ---

    def export_snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Structural snapshot of the diagram for display or debugging."""
        return self.exporter.snapshot(self.diagram)
