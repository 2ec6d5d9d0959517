"""Integration tests for complete editing sessions.

These drive the editor only through toolbar, pointer and menu events, the
way a host UI would, and check the structural guarantees of the diagram
after each session.
"""

import networkx as nx
import pytest

from flowbricks import BoxType, DiagramEditor, DiagramExporter, MenuAction, Tool


def place(editor, box_type, x, y):
    editor.select_tool(Tool.BOX, box_type)
    editor.click(x, y)
    return editor.diagram.boxes[-1]


def connect(editor, start, end):
    editor.select_tool(Tool.LINE)
    editor.drag(start, end)


def assert_chain_invariants(diagram):
    """Links are symmetric, single-valued and acyclic."""
    for box in diagram.boxes:
        if box.child is not None:
            assert diagram.box_by_id(box.child).parent == box.id
        if box.parent is not None:
            assert diagram.box_by_id(box.parent).child == box.id

    graph = DiagramExporter().stack_graph(diagram)
    assert nx.is_directed_acyclic_graph(graph)
    assert all(d <= 1 for _, d in graph.in_degree())
    assert all(d <= 1 for _, d in graph.out_degree())

    ids = {box.id for box in diagram.boxes}
    for conn in diagram.connections:
        assert conn.from_box in ids
        assert conn.to_box in ids


def assert_stacks_flush(diagram):
    """Every child is centered under and flush against its parent."""
    for box in diagram.boxes:
        if box.parent is not None:
            parent = diagram.box_by_id(box.parent)
            assert box.center_x == parent.center_x
            assert box.y == parent.bottom


class TestSnapScenario:
    """Snapping one box under another."""

    def test_two_boxes_snap(self, editor):
        """Dragging B just under A links them flush and centered."""
        a = place(editor, BoxType.T2, 100, 100)
        b = place(editor, BoxType.T2, 100, 300)

        # Grab B at its center and drop its top edge 12px below A's bottom
        editor.drag((100, 300), (104, 172))

        assert b.parent == a.id
        assert a.child == b.id
        assert b.x == a.x
        assert b.y == a.y + a.height
        assert_chain_invariants(editor.diagram)

    def test_build_tall_stack_stays_flush(self, editor):
        """Dropping boxes one by one builds a flush five-box stack."""
        top = place(editor, BoxType.T3, 200, 100)
        for i in range(4):
            place(editor, BoxType.T2, 500, 100 + 100 * i)

        expected_y = top.bottom
        for box in editor.diagram.boxes[1:]:
            center = (box.center_x, box.y + box.height / 2)
            editor.drag(center, (top.center_x + 5, expected_y + box.height / 2 + 8))
            expected_y += box.height

        assert len(editor.diagram.stack_of(top.id)) == 5
        assert_stacks_flush(editor.diagram)
        assert_chain_invariants(editor.diagram)

    def test_moving_stack_top_moves_everything(self, editor):
        """Dragging the top of a stack moves the whole stack."""
        a = place(editor, BoxType.T2, 100, 100)
        b = place(editor, BoxType.T2, 100, 300)
        editor.drag((100, 300), (100, 175))

        editor.drag((100, 100), (400, 300))
        assert (a.x, a.y) == (350, 270)
        assert (b.x, b.y) == (350, 330)
        assert b.parent == a.id


class TestSplitScenario:
    """Splitting a stack by dragging from the middle."""

    def test_split_middle_and_drop_in_open_space(self, editor):
        """Dragging a middle box away splits the stack in two."""
        boxes = [place(editor, BoxType.T2, 100, 100 + 200 * i) for i in range(3)]
        editor.drag((100, 300), (100, 175))
        editor.drag((100, 500), (100, 235))
        top, middle, bottom = boxes
        assert editor.diagram.stack_of(top.id) == [top.id, middle.id, bottom.id]

        editor.drag((100, 160), (500, 400))

        assert top.child is None
        assert middle.parent is None
        assert middle.child == bottom.id
        assert bottom.y - middle.y == middle.height
        assert bottom.x == middle.x
        assert editor.diagram.stack_of(top.id) == [top.id]
        assert_chain_invariants(editor.diagram)

    def test_split_and_resnap_elsewhere(self, editor):
        """A split-off box can snap under a different stack."""
        top = place(editor, BoxType.T2, 100, 100)
        middle = place(editor, BoxType.T2, 100, 300)
        anchor = place(editor, BoxType.T1, 400, 100)
        editor.drag((100, 300), (100, 175))

        editor.drag((100, 160), (405, 175))

        assert top.child is None
        assert middle.parent == anchor.id
        assert_stacks_flush(editor.diagram)
        assert_chain_invariants(editor.diagram)


class TestType1NeverChild:
    """Boxes with two top bumps can only head a stack."""

    @pytest.mark.parametrize("dx", [-20, 0, 15])
    def test_t1_dropped_under_box(self, editor, dx):
        """A T1 dropped under a box is never linked."""
        above = place(editor, BoxType.T3, 100, 100)
        t1 = place(editor, BoxType.T1, 300, 300)
        editor.drag((300, 300), (100 + dx, 165))

        assert t1.parent is None
        assert above.child is None

    def test_t1_can_be_parent(self, editor):
        """A box dropped under a T1 becomes its child."""
        t1 = place(editor, BoxType.T1, 100, 100)
        child = place(editor, BoxType.T2, 300, 300)
        editor.drag((300, 300), (100, 170))
        assert child.parent == t1.id

    def test_box_dropped_over_t1(self, editor):
        """A box dropped above a T1 does not pull it under."""
        t1 = place(editor, BoxType.T1, 100, 300)
        dropped = place(editor, BoxType.T2, 400, 100)
        editor.drag((400, 100), (100, 225))
        assert t1.parent is None
        assert dropped.child is None

    def test_t1_dragged_over_box(self, editor):
        """A lone T1 released just above a free box does not pull it under."""
        below = place(editor, BoxType.T2, 100, 300)
        t1 = place(editor, BoxType.T1, 400, 100)
        editor.drag((400, 100), (100, 225))
        assert t1.child is None
        assert below.parent is None


class TestSharedBumps:
    """Stacking links and explicit connections compete for the same bumps."""

    def test_stacked_bumps_cannot_be_wired(self, editor):
        """Bumps used by a stacking link cannot be wired."""
        a = place(editor, BoxType.T2, 100, 100)
        b = place(editor, BoxType.T2, 100, 300)
        editor.drag((100, 300), (100, 175))

        # Press and release right on the shared edge. Both points fall
        # within B's bump margin, and B's only free bump is its bottom, so
        # the gesture resolves to a self-connection and is dropped.
        connect(editor, (100, 126), (100, 134))
        assert editor.diagram.connections == []

        # Aiming at A's bottom and B's top: each end falls back to the
        # nearest bump still free, A's top and B's bottom.
        connect(editor, (100, 120), (100, 140))
        wired = [
            (c.from_box, c.from_bump, c.to_box, c.to_bump)
            for c in editor.diagram.connections
        ]
        assert wired == [(a.id, "top", b.id, "bottom")]

    def test_wired_bumps_cannot_be_stacked(self, editor):
        """Bumps used by a line cannot be stacked."""
        a = place(editor, BoxType.T2, 100, 100)
        b = place(editor, BoxType.T2, 400, 300)
        connect(editor, (100, 128), (400, 272))
        conn = editor.diagram.connections[0]
        assert (conn.from_bump, conn.to_bump) == ("bottom", "top")

        editor.drag((400, 300), (100, 175))
        assert b.parent is None
        assert a.child is None

    def test_rewiring_frees_bump_for_stacking(self, editor):
        """Removing the line frees the bump for stacking."""
        a = place(editor, BoxType.T2, 100, 100)
        b = place(editor, BoxType.T2, 400, 300)
        c = place(editor, BoxType.T3, 700, 100)
        connect(editor, (100, 128), (400, 272))

        # Move the line's tail from A's bottom to C's right bump
        editor.drag((100, 136), (748, 100))
        conn = editor.diagram.connections[0]
        assert (conn.from_box, conn.from_bump) == (c.id, "right")

        editor.drag((400, 300), (100, 175))
        assert b.parent is None  # B's top still carries the line

        menu = editor.context_menu_at(*_midpoint_of(editor, conn.id))
        editor.perform(menu, MenuAction.DELETE_LINE)
        editor.drag((100, 160), (100, 150))
        assert b.parent == a.id
        assert (b.x, b.y) == (a.x, a.bottom)


def _midpoint_of(editor, conn_id):
    conn = editor.diagram.connection_by_id(conn_id)
    start, end = editor.diagram.connection_endpoints(conn)
    return ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)


class TestDeletionScenarios:
    """Deleting boxes from stacks through the context menu."""

    @pytest.fixture
    def stacked(self, editor):
        boxes = [place(editor, BoxType.T3, 100, 100 + 200 * i) for i in range(3)]
        editor.drag((100, 300), (100, 175))
        editor.drag((100, 500), (100, 235))
        side = place(editor, BoxType.T2, 400, 400)
        connect(editor, (148, 160), (400, 372))  # middle.right -> side.top
        connect(editor, (148, 100), (400, 428))  # top.right -> side.bottom
        return boxes, side

    def test_delete_middle_only(self, editor, stacked):
        """Deleting only a middle box keeps the stack joined."""
        (top, middle, bottom), side = stacked
        menu = editor.context_menu_at(100, 160)
        assert menu.actions == (MenuAction.DELETE_BOX, MenuAction.DELETE_BOX_AND_BELOW)

        editor.perform(menu, MenuAction.DELETE_BOX)
        assert top.child == bottom.id
        assert bottom.parent == top.id
        assert (bottom.x, bottom.y) == (top.x, top.bottom)
        assert [c.from_box for c in editor.diagram.connections] == [top.id]
        assert_chain_invariants(editor.diagram)

    def test_delete_middle_and_below(self, editor, stacked):
        """Deleting a middle box and below leaves the top alone."""
        (top, middle, bottom), side = stacked
        menu = editor.context_menu_at(100, 160)
        editor.perform(menu, MenuAction.DELETE_BOX_AND_BELOW)

        assert top.child is None
        assert editor.diagram.box_by_id(middle.id) is None
        assert editor.diagram.box_by_id(bottom.id) is None
        assert len(editor.diagram.connections) == 1
        assert editor.diagram.connections[0].from_box == top.id
        assert_chain_invariants(editor.diagram)

    def test_delete_line_only(self, editor, stacked):
        """Deleting a line leaves the stack and other lines alone."""
        (top, middle, bottom), side = stacked
        conn_id = editor.diagram.connections[0].id
        menu = editor.context_menu_at(*_midpoint_of(editor, conn_id))
        assert menu.target_kind == "line"

        editor.perform(menu, MenuAction.DELETE_LINE)
        assert [c.id for c in editor.diagram.connections] == ["L1"]
        assert len(editor.diagram.boxes) == 4


class TestSnapshotExport:
    """The export snapshot reflects the session."""

    def test_snapshot_after_session(self):
        """The snapshot records links and connections from the session."""
        editor = DiagramEditor()
        place(editor, BoxType.T2, 100, 100)
        place(editor, BoxType.T3, 100, 300)
        editor.drag((100, 300), (100, 175))
        place(editor, BoxType.T2, 400, 100)
        connect(editor, (148, 160), (400, 72))

        snapshot = editor.export_snapshot()
        assert [(b["id"], b["parentBox"], b["childBox"]) for b in snapshot["boxes"]] == [
            ("B0", None, "B1"),
            ("B1", "B0", None),
            ("B2", None, None),
        ]
        assert snapshot["connections"] == [
            {"id": "L0", "from": "B1", "fromBump": "right", "to": "B2", "toBump": "top"}
        ]
