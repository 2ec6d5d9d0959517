"""Pytest configuration and shared fixtures for FlowBricks tests."""

import pytest

from flowbricks import BoxType, Diagram, DiagramEditor, StackingEngine


@pytest.fixture
def diagram():
    """Empty diagram with default box size (100 x 60)."""
    return Diagram()


@pytest.fixture
def stacking(diagram):
    """Stacking engine bound to the empty diagram."""
    return StackingEngine(diagram)


@pytest.fixture
def editor():
    """Editor over a fresh diagram."""
    return DiagramEditor()


@pytest.fixture
def stack_of_three(diagram):
    """
    Three T2 boxes stacked B0 -> B1 -> B2.

    B0 spans x 50..150, y 70..130; B1 sits at y 130..190 and B2 at 190..250.
    """
    top = diagram.create_box(100, 100, BoxType.T2)
    middle = diagram.create_box(100, 300, BoxType.T2)
    bottom = diagram.create_box(100, 500, BoxType.T2)
    diagram.link(top.id, middle.id)
    diagram.place_under(top.id, middle.id)
    diagram.link(middle.id, bottom.id)
    diagram.place_under(middle.id, bottom.id)
    return diagram


@pytest.fixture
def connected_pair(diagram):
    """
    A T3 box B0 (x 50..150, y 70..130) connected from its right bump to the
    top bump of a T2 box B1 (x 250..350, y 70..130).

    The connection L0 runs from tip (156, 100) to tip (300, 64).
    """
    source = diagram.create_box(100, 100, BoxType.T3)
    target = diagram.create_box(300, 100, BoxType.T2)
    diagram.create_connection(source.id, "right", target.id, "top")
    return diagram
