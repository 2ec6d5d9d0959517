"""
Export functionality for diagrams.

This module produces structural snapshots of a diagram:
- A plain dict / JSON text listing boxes and connections
- networkx graphs for analysis
- PNG images via the DiagramRenderer

Snapshots are presentational/debug output, not a save format: there is no
matching import path.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List

import networkx as nx

from .png_renderer import DiagramRenderer

if TYPE_CHECKING:
    from .diagram import Diagram

logger = logging.getLogger(__name__)


class DiagramExporter:
    """
    Exports diagrams to dicts, JSON, networkx graphs and PNG files.

    Attributes:
        indent: Indentation used for JSON output.
    """

    def __init__(self, indent: int = 2):
        """
        Initialize the diagram exporter.

        Args:
            indent: Indentation for JSON output.
        """
        self.indent = indent

    def snapshot(self, diagram: "Diagram") -> Dict[str, List[Dict[str, Any]]]:
        """
        Structural snapshot of a diagram.

        Args:
            diagram: Diagram to describe.

        Returns:
            Dict with a "boxes" list (id, position, size, type, parent and
            child ids) and a "connections" list (id, endpoint box ids and
            bump names), both in creation order.
        """
        return {
            "boxes": [
                {
                    "id": box.id,
                    "x": box.x,
                    "y": box.y,
                    "width": box.width,
                    "height": box.height,
                    "type": box.type.value,
                    "parentBox": box.parent,
                    "childBox": box.child,
                }
                for box in diagram.boxes
            ],
            "connections": [
                {
                    "id": conn.id,
                    "from": conn.from_box,
                    "fromBump": conn.from_bump,
                    "to": conn.to_box,
                    "toBump": conn.to_bump,
                }
                for conn in diagram.connections
            ],
        }

    def to_json(self, diagram: "Diagram") -> str:
        """Snapshot as pretty-printed JSON text."""
        return json.dumps(self.snapshot(diagram), indent=self.indent)

    def save_json(self, diagram: "Diagram", filename: str) -> None:
        """
        Save the snapshot to a JSON file.

        Args:
            diagram: Diagram to export.
            filename: Output filename (should end in .json).
        """
        output_path = Path(filename)
        output_path.write_text(self.to_json(diagram), encoding="utf-8")
        logger.info("Wrote snapshot of %d box(es) to %s", len(diagram.boxes), output_path)

    def to_networkx(self, diagram: "Diagram") -> nx.MultiDiGraph:
        """
        Diagram as a networkx multigraph.

        Boxes become nodes (with type and position attributes). Each stacking
        link becomes a "stack" edge from parent to child, and each connection
        a "connection" edge carrying its id and bump names. A multigraph is
        used since two boxes may be joined by several connections.
        """
        graph = nx.MultiDiGraph()
        for box in diagram.boxes:
            graph.add_node(box.id, type=box.type.value, x=box.x, y=box.y)

        for box in diagram.boxes:
            if box.child is not None:
                graph.add_edge(box.id, box.child, kind="stack")

        for conn in diagram.connections:
            graph.add_edge(
                conn.from_box,
                conn.to_box,
                key=conn.id,
                kind="connection",
                from_bump=conn.from_bump,
                to_bump=conn.to_bump,
            )
        return graph

    def stack_graph(self, diagram: "Diagram") -> nx.DiGraph:
        """Only the stacking links, as a DiGraph (a forest of simple paths)."""
        graph = nx.DiGraph()
        graph.add_nodes_from(box.id for box in diagram.boxes)
        graph.add_edges_from(
            (box.id, box.child) for box in diagram.boxes if box.child is not None
        )
        return graph

    def save_png(self, diagram: "Diagram", filename: str, **kwargs) -> str:
        """
        Save the diagram as a PNG image.

        Args:
            diagram: Diagram to render.
            filename: Output filename (should end in .png).
            **kwargs: Parameters for DiagramRenderer.

        Returns:
            Path to the saved PNG file.
        """
        renderer = DiagramRenderer(**kwargs)
        return renderer.render(diagram, output_path=filename)
