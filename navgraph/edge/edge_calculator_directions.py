"""Catalog of the semantic directions known to the edge calculator.

Each direction is characterized by an ideal value of the candidate attributes: steps by the ideal motion change,
turns by the ideal heading change (and motion change, where one is preferred) and pano directions by the heading
change of a perspective image seen from a panorama.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from navgraph.edge.edge_direction import EdgeDirection


@dataclass(frozen=True)
class StepDirection:
    direction: EdgeDirection
    motion_change: float
    use_fallback: bool
    fallback: EdgeDirection


@dataclass(frozen=True)
class TurnDirection:
    direction: EdgeDirection
    direction_change: float
    motion_change: Optional[float]  # None when any motion is acceptable.


@dataclass(frozen=True)
class PanoDirection:
    direction: EdgeDirection
    direction_change: float
    prev: EdgeDirection
    next: EdgeDirection


_DEFAULT_STEPS = (
    StepDirection(EdgeDirection.STEP_FORWARD, 0.0, True, EdgeDirection.STEP_BACKWARD),
    StepDirection(EdgeDirection.STEP_BACKWARD, math.pi, True, EdgeDirection.STEP_FORWARD),
    StepDirection(EdgeDirection.STEP_LEFT, math.pi / 2, False, EdgeDirection.STEP_RIGHT),
    StepDirection(EdgeDirection.STEP_RIGHT, -math.pi / 2, False, EdgeDirection.STEP_LEFT),
)

_DEFAULT_TURNS = (
    TurnDirection(EdgeDirection.TURN_LEFT, math.pi / 2, math.pi / 4),
    TurnDirection(EdgeDirection.TURN_RIGHT, -math.pi / 2, -math.pi / 4),
    TurnDirection(EdgeDirection.TURN_U, math.pi, None),
)

_DEFAULT_PANOS = (
    PanoDirection(EdgeDirection.STEP_FORWARD, 0.0, EdgeDirection.STEP_RIGHT, EdgeDirection.STEP_LEFT),
    PanoDirection(EdgeDirection.STEP_BACKWARD, math.pi, EdgeDirection.STEP_LEFT, EdgeDirection.STEP_RIGHT),
    PanoDirection(EdgeDirection.STEP_LEFT, math.pi / 2, EdgeDirection.STEP_FORWARD, EdgeDirection.STEP_BACKWARD),
    PanoDirection(EdgeDirection.STEP_RIGHT, -math.pi / 2, EdgeDirection.STEP_BACKWARD, EdgeDirection.STEP_FORWARD),
)


def _by_direction(definitions) -> dict:
    return {definition.direction: definition for definition in definitions}


class EdgeCalculatorDirections:
    """Read-only lookup of direction definitions, constructed once and shared by calculators."""

    def __init__(self) -> None:
        self._steps = _by_direction(_DEFAULT_STEPS)
        self._turns = _by_direction(_DEFAULT_TURNS)
        self._panos = _by_direction(_DEFAULT_PANOS)

    def __repr__(self) -> str:
        return (
            f"EdgeCalculatorDirections(steps={[d.value for d in self._steps]}, "
            f"turns={[d.value for d in self._turns]}, panos={[d.value for d in self._panos]})"
        )

    @property
    def steps(self) -> Mapping[EdgeDirection, StepDirection]:
        return MappingProxyType(self._steps)

    @property
    def turns(self) -> Mapping[EdgeDirection, TurnDirection]:
        return MappingProxyType(self._turns)

    @property
    def panos(self) -> Mapping[EdgeDirection, PanoDirection]:
        return MappingProxyType(self._panos)

    def ideal_motion_change(self, direction: EdgeDirection) -> Optional[float]:
        """Ideal motion change of a step or turn direction.

        Returns:
            The ideal motion change, or None for a turn without a preferred motion (the u-turn).

        Raises:
            ValueError: if the direction is neither a step nor a turn.
        """
        if direction in self._steps:
            return self._steps[direction].motion_change
        if direction in self._turns:
            return self._turns[direction].motion_change
        raise ValueError(f"Direction {direction} has no ideal motion change.")
