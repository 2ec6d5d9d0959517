"""
Stacking engine.

Decides which boxes move together when a box is grabbed, moves them as a
rigid unit, and on release tries to snap the unit onto another box:

1. The unit's top box under the bottom edge of some other box.
2. The unit's bottom box over the top edge of some other box.

Either rule is only started by a box with a single top bump; boxes with two
top bumps can head a stack but never initiate a snap.

The first rule is tried first and candidates are scanned in creation order;
the first geometric match wins, not the closest one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .bumps import can_become_child, has_connection_on_kind
from .constants import ALIGN_TOLERANCE, SNAP_THRESHOLD
from .diagram import Diagram
from .models import Box, BumpKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapResult:
    """A stacking link created on release."""

    parent_id: str
    child_id: str


class StackingEngine:
    """Drag grouping and snap-on-release for a diagram."""

    def __init__(
        self,
        diagram: Diagram,
        snap_threshold: float = SNAP_THRESHOLD,
        align_tolerance: float = ALIGN_TOLERANCE,
    ):
        self.diagram = diagram
        self.snap_threshold = snap_threshold
        self.align_tolerance = align_tolerance

    def begin_drag(self, box_id: str) -> List[str]:
        """
        Work out the drag unit for a grabbed box.

        Grabbing the top of a stack drags the whole stack. Grabbing any
        other box splits the stack just above it, and the unit is the
        grabbed box plus everything below. The split is permanent.

        Returns:
            Ids of the boxes in the unit, top to bottom.
        """
        box = self.diagram.box_by_id(box_id)
        if box is None:
            return []

        if box.parent is not None:
            parent_id = box.parent
            self.diagram.unlink(parent_id, box_id)
            logger.debug("Split stack between %s and %s", parent_id, box_id)

        return [box_id] + self.diagram.descendants(box_id)

    def move(self, unit: List[str], dx: float, dy: float) -> None:
        """Translate every box in the unit by the same delta."""
        for box_id in unit:
            box = self.diagram.box_by_id(box_id)
            if box is not None:
                box.x += dx
                box.y += dy

    def _aligned(self, upper: Box, lower: Box) -> bool:
        vertical = abs(upper.bottom - lower.y)
        horizontal = abs(upper.center_x - lower.center_x)
        return horizontal < self.align_tolerance and vertical < self.snap_threshold

    def try_snap(self, unit: List[str]) -> Optional[SnapResult]:
        """
        Attempt a single snap for a released unit.

        Explicit connections and stacking links share the same bumps, so a
        side that already carries a connection on the relevant bump kind can
        neither initiate nor receive a snap.

        Returns:
            The created link, or None if nothing was in range. Ids of boxes
            deleted since the drag began are ignored.
        """
        diagram = self.diagram
        unit = [box_id for box_id in unit if diagram.box_by_id(box_id) is not None]
        if not unit:
            return None

        connections = diagram.connections
        top = diagram.box_by_id(unit[0])
        bottom = diagram.box_by_id(unit[-1])
        members = set(unit)
        candidates = [box for box in diagram.boxes if box.id not in members]

        if (
            can_become_child(top.type)
            and top.parent is None
            and not has_connection_on_kind(top, connections, BumpKind.TOP)
        ):
            for box in candidates:
                if box.child is not None:
                    continue
                if has_connection_on_kind(box, connections, BumpKind.BOTTOM):
                    continue
                if self._aligned(box, top):
                    return self._snap(box.id, top.id)

        if (
            can_become_child(bottom.type)
            and bottom.child is None
            and not has_connection_on_kind(bottom, connections, BumpKind.BOTTOM)
        ):
            for box in candidates:
                if box.parent is not None or not can_become_child(box.type):
                    continue
                if has_connection_on_kind(box, connections, BumpKind.TOP):
                    continue
                if self._aligned(bottom, box):
                    return self._snap(bottom.id, box.id)

        return None

    def _snap(self, parent_id: str, child_id: str) -> SnapResult:
        self.diagram.link(parent_id, child_id)
        self.diagram.place_under(parent_id, child_id)
        logger.debug("Snapped %s under %s", child_id, parent_id)
        return SnapResult(parent_id=parent_id, child_id=child_id)
