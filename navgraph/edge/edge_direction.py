"""Semantic directions of navigation edges."""

from enum import Enum


class EdgeDirection(str, Enum):
    STEP_FORWARD = "step_forward"
    STEP_BACKWARD = "step_backward"
    STEP_LEFT = "step_left"
    STEP_RIGHT = "step_right"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    TURN_U = "turn_u"
    PANO = "pano"


STEP_DIRECTIONS = (
    EdgeDirection.STEP_FORWARD,
    EdgeDirection.STEP_BACKWARD,
    EdgeDirection.STEP_LEFT,
    EdgeDirection.STEP_RIGHT,
)

TURN_DIRECTIONS = (
    EdgeDirection.TURN_LEFT,
    EdgeDirection.TURN_RIGHT,
    EdgeDirection.TURN_U,
)
