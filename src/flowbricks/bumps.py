"""
Bump model.

Each box type has a fixed, ordered list of named bumps. Bumps are never
stored: they are derived from a box's type, position and size whenever they
are needed. The same bumps serve both as stacking anchors (top/bottom) and
as endpoints for explicit connections, so availability depends on the
box's current stacking links.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .constants import BUMP_RADIUS
from .geometry import Point, nearest
from .models import Box, Bump, BumpKind, BumpSpec, BoxType, Connection

BUMP_LAYOUTS: Dict[BoxType, Tuple[BumpSpec, ...]] = {
    BoxType.T1: (
        BumpSpec("top-left", BumpKind.TOP, (0.3, 0.0)),
        BumpSpec("top-right", BumpKind.TOP, (0.7, 0.0)),
        BumpSpec("bottom", BumpKind.BOTTOM, (0.5, 1.0)),
    ),
    BoxType.T2: (
        BumpSpec("top", BumpKind.TOP, (0.5, 0.0)),
        BumpSpec("bottom", BumpKind.BOTTOM, (0.5, 1.0)),
    ),
    BoxType.T3: (
        BumpSpec("top", BumpKind.TOP, (0.5, 0.0)),
        BumpSpec("bottom", BumpKind.BOTTOM, (0.5, 1.0)),
        BumpSpec("right", BumpKind.RIGHT, (1.0, 0.5)),
    ),
}

# Outward unit normal per bump kind
_NORMALS: Dict[BumpKind, Tuple[int, int]] = {
    BumpKind.TOP: (0, -1),
    BumpKind.BOTTOM: (0, 1),
    BumpKind.RIGHT: (1, 0),
}

_KIND_BY_NAME: Dict[str, BumpKind] = {
    spec.id: spec.kind for layout in BUMP_LAYOUTS.values() for spec in layout
}


def bump_kind(bump_id: str) -> Optional[BumpKind]:
    """Classification of a bump name, or None for an unknown name."""
    return _KIND_BY_NAME.get(bump_id)


def can_become_child(box_type: BoxType) -> bool:
    """
    Whether boxes of this type may be stacked under another box.

    Only types with a single top bump qualify; a type with two top bumps
    has no unambiguous anchor for a parent link.
    """
    tops = [spec for spec in BUMP_LAYOUTS[box_type] if spec.kind is BumpKind.TOP]
    return len(tops) == 1


def _find_spec(box_type: BoxType, bump_id: str) -> Optional[BumpSpec]:
    for spec in BUMP_LAYOUTS[box_type]:
        if spec.id == bump_id:
            return spec
    return None


def _resolve(box: Box, spec: BumpSpec) -> Bump:
    fx, fy = spec.anchor
    return Bump(
        id=spec.id,
        kind=spec.kind,
        x=box.x + box.width * fx,
        y=box.y + box.height * fy,
    )


def get_bumps(box: Box) -> List[Bump]:
    """All bumps of a box in declared order, at absolute coordinates."""
    return [_resolve(box, spec) for spec in BUMP_LAYOUTS[box.type]]


def get_bump(box: Box, bump_id: str) -> Optional[Bump]:
    spec = _find_spec(box.type, bump_id)
    return _resolve(box, spec) if spec else None


def bump_tip_position(
    box: Box, bump_id: str, radius: float = BUMP_RADIUS
) -> Optional[Point]:
    """
    Where a line attached to the given bump starts or ends.

    The tip is the bump's anchor pushed outward by ``radius`` along the
    normal of its edge. Returns None if the box type has no such bump.
    """
    bump = get_bump(box, bump_id)
    if bump is None:
        return None
    nx, ny = _NORMALS[bump.kind]
    return (bump.x + nx * radius, bump.y + ny * radius)


def is_bump_available(box: Box, bump: Bump) -> bool:
    """
    Whether a bump can take a new attachment.

    A top bump is free while the box has no parent and a bottom bump while
    it has no child. Right bumps accept any number of connections.
    """
    if bump.kind is BumpKind.TOP:
        return box.parent is None
    if bump.kind is BumpKind.BOTTOM:
        return box.child is None
    return bump.kind is BumpKind.RIGHT


def nearest_available_bump(box: Box, point: Point) -> Optional[Bump]:
    """The available bump whose anchor is closest to ``point``, if any."""
    available = [bump for bump in get_bumps(box) if is_bump_available(box, bump)]
    return nearest(point, available, key=lambda bump: bump.position)


def has_connection_on_kind(
    box: Box, connections: Iterable[Connection], kind: BumpKind
) -> bool:
    """True if any connection uses a bump of ``kind`` on this box."""
    for conn in connections:
        if conn.from_box == box.id and bump_kind(conn.from_bump) is kind:
            return True
        if conn.to_box == box.id and bump_kind(conn.to_bump) is kind:
            return True
    return False
