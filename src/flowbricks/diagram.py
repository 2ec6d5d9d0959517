"""
Diagram graph store.

Owns every box and connection of an editing session, hands out their ids,
and maintains the parent/child stacking links. Boxes live in an arena keyed
by id; stacking links and connection endpoints are id references into it,
so deleting or exporting a box never involves chasing object references.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .bumps import bump_tip_position
from .constants import (
    BOX_HEIGHT,
    BOX_ID_PREFIX,
    BOX_WIDTH,
    BUMP_RADIUS,
    CONNECTION_ID_PREFIX,
    LINE_END_HIT_RADIUS,
    LINE_HIT_DISTANCE,
)
from .geometry import Point, distance, point_to_segment_distance, rect_contains
from .models import Box, BoxType, Connection, DiagramError, LineEnd

logger = logging.getLogger(__name__)


class Diagram:
    """Boxes, connections and the stacking links between boxes."""

    def __init__(
        self,
        box_width: float = BOX_WIDTH,
        box_height: float = BOX_HEIGHT,
        bump_radius: float = BUMP_RADIUS,
    ):
        self.box_width = box_width
        self.box_height = box_height
        self.bump_radius = bump_radius

        self._boxes: Dict[str, Box] = {}  # insertion order == creation order
        self._connections: List[Connection] = []
        self._box_counter = 0
        self._connection_counter = 0

    # --- Lookups ---

    @property
    def boxes(self) -> List[Box]:
        """All boxes in creation order."""
        return list(self._boxes.values())

    @property
    def connections(self) -> List[Connection]:
        """All connections in creation order."""
        return list(self._connections)

    def box_by_id(self, box_id: Optional[str]) -> Optional[Box]:
        if box_id is None:
            return None
        return self._boxes.get(box_id)

    def connection_by_id(self, conn_id: Optional[str]) -> Optional[Connection]:
        for conn in self._connections:
            if conn.id == conn_id:
                return conn
        return None

    def _require_box(self, box_id: str) -> Box:
        box = self._boxes.get(box_id)
        if box is None:
            raise DiagramError(f"Unknown box: {box_id}")
        return box

    # --- Creation ---

    def create_box(self, x: float, y: float, box_type: BoxType) -> Box:
        """
        Create a box centered on (x, y).

        Args:
            x: Center x-coordinate.
            y: Center y-coordinate.
            box_type: Type of the new box.

        Returns:
            The new box, with no stacking links.
        """
        box_type = BoxType(box_type)
        box = Box(
            id=f"{BOX_ID_PREFIX}{self._box_counter}",
            x=x - self.box_width / 2,
            y=y - self.box_height / 2,
            width=self.box_width,
            height=self.box_height,
            type=box_type,
        )
        self._box_counter += 1
        self._boxes[box.id] = box
        logger.debug("Created box %s (%s) at (%s, %s)", box.id, box_type.name, box.x, box.y)
        return box

    def create_connection(
        self, from_box: str, from_bump: str, to_box: str, to_bump: str
    ) -> Connection:
        """
        Record a directed connection between two bumps.

        The caller is responsible for bump availability and for keeping the
        two endpoints on different boxes; this only records the link.
        """
        conn = Connection(
            id=f"{CONNECTION_ID_PREFIX}{self._connection_counter}",
            from_box=from_box,
            from_bump=from_bump,
            to_box=to_box,
            to_bump=to_bump,
        )
        self._connection_counter += 1
        self._connections.append(conn)
        logger.debug(
            "Created connection %s: %s.%s -> %s.%s",
            conn.id, from_box, from_bump, to_box, to_bump,
        )
        return conn

    def reconnect(self, conn_id: str, end: LineEnd, box_id: str, bump_id: str) -> Connection:
        """Move one end of a connection to another bump."""
        conn = self.connection_by_id(conn_id)
        if conn is None:
            raise DiagramError(f"Unknown connection: {conn_id}")
        self._require_box(box_id)

        if end is LineEnd.FROM:
            conn.from_box, conn.from_bump = box_id, bump_id
        else:
            conn.to_box, conn.to_bump = box_id, bump_id
        logger.debug("Rewired %s end of %s to %s.%s", end.value, conn_id, box_id, bump_id)
        return conn

    # --- Stacking links ---

    def link(self, parent_id: str, child_id: str) -> None:
        """Stack ``child_id`` directly under ``parent_id``."""
        parent = self._require_box(parent_id)
        child = self._require_box(child_id)
        if parent_id == child_id:
            raise DiagramError(f"Cannot stack {parent_id} under itself")
        if parent.child is not None or child.parent is not None:
            raise DiagramError(f"Cannot stack {child_id} under {parent_id}: slot taken")

        parent.child = child_id
        child.parent = parent_id

    def unlink(self, parent_id: str, child_id: str) -> None:
        """Break the stacking link between a parent and its child."""
        parent = self._require_box(parent_id)
        child = self._require_box(child_id)
        if parent.child != child_id or child.parent != parent_id:
            raise DiagramError(f"{child_id} is not stacked under {parent_id}")

        parent.child = None
        child.parent = None

    def top_of(self, box_id: str) -> Box:
        box = self._require_box(box_id)
        while box.parent is not None:
            box = self._boxes[box.parent]
        return box

    def descendants(self, box_id: str) -> List[str]:
        """Ids of every box below this one, nearest first."""
        result = []
        current = self._require_box(box_id).child
        while current is not None:
            result.append(current)
            current = self._boxes[current].child
        return result

    def stack_of(self, box_id: str) -> List[str]:
        """The whole stack containing the box, top to bottom."""
        top = self.top_of(box_id)
        return [top.id] + self.descendants(top.id)

    def is_stacked(self, box_id: str) -> bool:
        return len(self.stack_of(box_id)) > 1

    def place_under(self, parent_id: str, child_id: str) -> None:
        """
        Move a child flush under its parent, horizontally centered.

        The child's horizontal shift is applied to all of its descendants,
        and each descendant is pulled flush under its own parent, so the
        chain below stays rigid and centered.
        """
        parent = self._require_box(parent_id)
        child = self._require_box(child_id)

        old_x = child.x
        child.x = parent.x + (parent.width - child.width) / 2
        child.y = parent.bottom
        self._shift_descendants(child, child.x - old_x)

    def _shift_descendants(self, box: Box, delta_x: float) -> None:
        above = box
        current = self.box_by_id(box.child)
        while current is not None:
            current.x += delta_x
            current.y = above.bottom
            above = current
            current = self.box_by_id(current.child)

    # --- Deletion ---

    def delete_connection(self, conn_id: str) -> bool:
        """Remove a connection. Returns False if it did not exist."""
        conn = self.connection_by_id(conn_id)
        if conn is None:
            return False
        self._connections.remove(conn)
        logger.debug("Deleted connection %s", conn_id)
        return True

    def delete_box(self, box_id: str, include_descendants: bool = False) -> List[str]:
        """
        Delete a box, and optionally everything stacked below it.

        With ``include_descendants`` the stack is truncated at the box: its
        parent loses its child and the box plus its whole descendant chain
        are removed. Without it, a box in the middle of a stack is spliced
        out: its parent and child are linked directly and the child is
        pulled flush under the parent, bringing its own descendants along.
        Connections touching any removed box are pruned either way.

        Args:
            box_id: Box to delete.
            include_descendants: Also delete every box below it.

        Returns:
            Ids of the removed boxes (empty if the box did not exist).
        """
        box = self._boxes.get(box_id)
        if box is None:
            return []

        parent = self.box_by_id(box.parent)
        child = self.box_by_id(box.child)

        if include_descendants:
            doomed = [box_id] + self.descendants(box_id)
            if parent is not None:
                parent.child = None
        else:
            doomed = [box_id]
            if parent is not None and child is not None:
                parent.child = child.id
                child.parent = parent.id
                self.place_under(parent.id, child.id)
            else:
                if parent is not None:
                    parent.child = None
                if child is not None:
                    child.parent = None

        for doomed_id in doomed:
            del self._boxes[doomed_id]
        doomed_set = set(doomed)
        before = len(self._connections)
        self._connections = [
            conn
            for conn in self._connections
            if conn.from_box not in doomed_set and conn.to_box not in doomed_set
        ]
        logger.debug(
            "Deleted boxes %s, pruned %d connection(s)",
            doomed, before - len(self._connections),
        )
        return doomed

    # --- Geometry queries ---

    def tip_position(self, box_id: str, bump_id: str) -> Optional[Point]:
        box = self.box_by_id(box_id)
        if box is None:
            return None
        return bump_tip_position(box, bump_id, self.bump_radius)

    def connection_endpoints(self, conn: Connection) -> Optional[Tuple[Point, Point]]:
        """
        Tip positions of both ends of a connection.

        Returns None when either end refers to a missing box or bump, so
        callers can skip the connection.
        """
        start = self.tip_position(conn.from_box, conn.from_bump)
        end = self.tip_position(conn.to_box, conn.to_bump)
        if start is None or end is None:
            return None
        return start, end

    def find_box_at(self, point: Point, margin: float = 0) -> Optional[Box]:
        """Topmost box under the point; newer boxes win on overlap."""
        for box in reversed(self._boxes.values()):
            if rect_contains(box.x, box.y, box.width, box.height, point, margin):
                return box
        return None

    def find_line_end_at(
        self, point: Point, threshold: float = LINE_END_HIT_RADIUS
    ) -> Optional[Tuple[Connection, LineEnd]]:
        """First connection end whose tip lies within ``threshold``."""
        for conn in self._connections:
            endpoints = self.connection_endpoints(conn)
            if endpoints is None:
                continue
            start, end = endpoints
            if distance(point, start) < threshold:
                return conn, LineEnd.FROM
            if distance(point, end) < threshold:
                return conn, LineEnd.TO
        return None

    def find_connection_at(
        self, point: Point, threshold: float = LINE_HIT_DISTANCE
    ) -> Optional[Connection]:
        """First connection whose segment passes within ``threshold``."""
        for conn in self._connections:
            endpoints = self.connection_endpoints(conn)
            if endpoints is None:
                continue
            if point_to_segment_distance(point, *endpoints) < threshold:
                return conn
        return None
