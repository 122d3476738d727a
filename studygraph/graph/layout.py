"""Layout positions and visual styles derived from importance and weight."""

from __future__ import annotations

import math

from studygraph.models.schemas import EdgeStyle, NodeStyle, Position

LAYOUT_RADIUS = 300.0


def circular_position(index: int, total: int, radius: float = LAYOUT_RADIUS) -> Position:
    """Evenly spaced point on a circle centred at the origin."""
    if total <= 0:
        return Position()
    angle = index / total * 2 * math.pi
    return Position(x=round(math.cos(angle) * radius, 4), y=round(math.sin(angle) * radius, 4))


def node_style(importance: float) -> NodeStyle:
    if importance > 0.7:
        color = "#ff6b6b"
    elif importance > 0.5:
        color = "#4ecdc4"
    else:
        color = "#95a5a6"
    return NodeStyle(color=color, size=max(10.0, importance * 30), shape="circle")


def edge_style(weight: float) -> EdgeStyle:
    return EdgeStyle(
        color="#2c3e50" if weight > 0.7 else "#7f8c8d",
        width=max(1.0, weight * 3),
        dashes=weight < 0.4,
    )
