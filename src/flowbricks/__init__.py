"""
FlowBricks - Stackable Dataflow Diagrams

An editor core for dataflow-style diagrams: typed boxes that stack into
chains by snapping, joined by directed connections between named bumps.

Example:
    >>> from flowbricks import BoxType, DiagramEditor, Tool
    >>> editor = DiagramEditor()
    >>> state = editor.select_tool(Tool.BOX, BoxType.T2)
    >>> state = editor.click(100, 100)
    >>> state = editor.select_tool(Tool.BOX, BoxType.T2)
    >>> state = editor.click(100, 300)
    >>> state = editor.drag((100, 300), (100, 175))
    >>> editor.diagram.box_by_id("B1").parent
    'B0'
"""

from .bumps import (
    BUMP_LAYOUTS,
    bump_kind,
    bump_tip_position,
    can_become_child,
    get_bumps,
    has_connection_on_kind,
    is_bump_available,
    nearest_available_bump,
)
from .diagram import Diagram
from .export import DiagramExporter
from .interaction import (
    ContextMenu,
    Cursor,
    DiagramEditor,
    DraggingLineEnd,
    DraggingStack,
    Idle,
    MenuAction,
    PendingConnection,
    ToolArmed,
    TransientLine,
)
from .models import (
    Box,
    BoxType,
    Bump,
    BumpKind,
    BumpSpec,
    Connection,
    DiagramError,
    LineEnd,
    Tool,
)
from .png_renderer import DiagramRenderer, render_to_png
from .stacking import SnapResult, StackingEngine

__version__ = "0.1.0"

__all__ = [
    # Main API
    "DiagramEditor",
    "Diagram",
    "StackingEngine",
    "SnapResult",
    # Models
    "Box",
    "BoxType",
    "Bump",
    "BumpKind",
    "BumpSpec",
    "Connection",
    "DiagramError",
    "LineEnd",
    "Tool",
    # Bumps
    "BUMP_LAYOUTS",
    "bump_kind",
    "bump_tip_position",
    "can_become_child",
    "get_bumps",
    "has_connection_on_kind",
    "is_bump_available",
    "nearest_available_bump",
    # Interaction states
    "Idle",
    "ToolArmed",
    "DraggingStack",
    "DraggingLineEnd",
    "PendingConnection",
    "TransientLine",
    "Cursor",
    "ContextMenu",
    "MenuAction",
    # Adapters
    "DiagramRenderer",
    "render_to_png",
    "DiagramExporter",
]
