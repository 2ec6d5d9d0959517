#!/usr/bin/env python3
"""
Demo script for the flowbricks diagram editor.

Drives an editor through scripted pointer gestures, the same events a
canvas UI would send, and prints the structure after each step. The final
diagram is written out as JSON and PNG.
"""

import logging
import sys

from flowbricks import BoxType, DiagramEditor, DiagramExporter, MenuAction, Tool


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_structure(editor):
    """Print every box with its stacking links, then every connection."""
    snapshot = editor.export_snapshot()
    for box in snapshot["boxes"]:
        print(
            f"  {box['id']:<4} T{box['type']} at ({box['x']:g}, {box['y']:g})"
            f"  parent={box['parentBox']}  child={box['childBox']}"
        )
    for conn in snapshot["connections"]:
        print(f"  {conn['id']:<4} {conn['from']}.{conn['fromBump']} -> {conn['to']}.{conn['toBump']}")
    if not snapshot["boxes"]:
        print("  (empty)")


def place(editor, box_type, x, y):
    editor.select_tool(Tool.BOX, box_type)
    editor.click(x, y)
    return editor.diagram.boxes[-1]


def demo_1(editor):
    """Demo 1: Placing and stacking boxes"""
    print_header("Demo 1: Placing and Stacking Boxes")

    place(editor, BoxType.T1, 150, 100)
    place(editor, BoxType.T2, 400, 250)
    place(editor, BoxType.T3, 400, 400)
    print("Placed three boxes:")
    print_structure(editor)

    # Drop each box just below the one above it
    editor.drag((400, 250), (155, 175))
    editor.drag((400, 400), (145, 235))
    print("\nAfter dragging them under each other:")
    print_structure(editor)


def demo_2(editor):
    """Demo 2: Wiring bumps together"""
    print_header("Demo 2: Wiring Bumps Together")

    place(editor, BoxType.T2, 450, 120)
    editor.select_tool(Tool.LINE)
    editor.drag((198, 220), (450, 92))
    print("Drew a line from the bottom box's right bump to a new box:")
    print_structure(editor)

    editor.drag((450, 84), (450, 145))
    print("\nMoved the line's arrowhead to the bottom bump:")
    print_structure(editor)


def demo_3(editor):
    """Demo 3: Splitting a stack"""
    print_header("Demo 3: Splitting a Stack")

    editor.drag((150, 160), (300, 420))
    print("Grabbed the middle box and pulled it away:")
    print_structure(editor)

    editor.drag((300, 420), (150, 165))
    print("\nDropped it back under the top box:")
    print_structure(editor)


def demo_4(editor):
    """Demo 4: Context menu deletion"""
    print_header("Demo 4: Context Menu Deletion")

    menu = editor.context_menu_at(150, 160)
    print(f"Menu for {menu.target_id}: {[action.label for action in menu.actions]}")
    removed = editor.perform(menu, MenuAction.DELETE_BOX)
    print(f"Deleted {removed}; the box below closes the gap:")
    print_structure(editor)


def main():
    """Main demo function."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("\n" + "=" * 70)
    print("  FLOWBRICKS - DEMONSTRATION")
    print("=" * 70)

    editor = DiagramEditor()
    for demo_func in (demo_1, demo_2, demo_3, demo_4):
        demo_func(editor)

    print_header("Export")
    exporter = DiagramExporter()
    exporter.save_json(editor.diagram, "flowbricks_demo.json")
    exporter.save_png(editor.diagram, "flowbricks_demo.png")
    print("Wrote flowbricks_demo.json and flowbricks_demo.png")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nDemo interrupted. Goodbye!")
        sys.exit(0)
