"""Thresholds used by the edge calculator.

Distances are in meters, angles in radians.
"""

import math
from dataclasses import dataclass, fields


@dataclass(frozen=True)
class EdgeCalculatorSettings:
    """Immutable set of named thresholds, one group per direction family.

    Attributes:
        step_max_distance: max distance to a step candidate.
        step_max_direction_change: max heading change of a step candidate.
        step_max_drift: max deviation of a step candidate's motion from the ideal step motion.
        step_preferred_distance: distance to which step candidates are ranked.
        turn_max_distance: max distance to a turn candidate admitted through the generic path.
        turn_max_direction_change: half-width of the angular window around each turn direction.
        turn_max_rig_distance: max distance to a turn candidate admitted through the rig path.
        turn_min_rig_direction_change: min heading change of a turn candidate admitted through the rig path.
        pano_min_distance: min distance to a panorama candidate.
        pano_max_distance: max distance to a panorama or pano step candidate.
        pano_preferred_distance: distance to which panorama candidates are ranked.
        pano_max_items: number of horizon sectors searched for panorama edges.
        pano_max_step_turn_change: max deviation between a pano step candidate's turn and a pano direction.
    """

    step_max_distance: float = 20.0
    step_max_direction_change: float = math.pi / 6
    step_max_drift: float = math.pi / 6
    step_preferred_distance: float = 4.0
    turn_max_distance: float = 15.0
    turn_max_direction_change: float = 2 * math.pi / 9
    turn_max_rig_distance: float = 0.65
    turn_min_rig_direction_change: float = math.pi / 6
    pano_min_distance: float = 0.1
    pano_max_distance: float = 20.0
    pano_preferred_distance: float = 5.0
    pano_max_items: int = 4
    pano_max_step_turn_change: float = math.pi / 8

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Setting {field.name} must be a positive number, got {value}.")
        if self.pano_min_distance > self.pano_max_distance:
            raise ValueError(
                f"pano_min_distance ({self.pano_min_distance}) exceeds pano_max_distance ({self.pano_max_distance})."
            )
        if int(self.pano_max_items) != self.pano_max_items:
            raise ValueError(f"pano_max_items must be an integer, got {self.pano_max_items}.")

    @property
    def max_distance(self) -> float:
        """Largest distance at which any direction family accepts a candidate."""
        return max(self.step_max_distance, self.turn_max_distance, self.pano_max_distance)
