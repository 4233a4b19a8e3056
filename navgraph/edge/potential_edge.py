"""Candidate edge between a source image and one of its neighbors.

A PotentialEdge summarizes everything the edge calculator needs to classify and rank a single
source -> candidate relationship. It is built right before a classification call and discarded afterwards.
"""

import math
from dataclasses import dataclass


def _is_wrapped_angle(angle: float) -> bool:
    return -math.pi < angle <= math.pi


@dataclass(frozen=True)
class PotentialEdge:
    """Geometric and relational attributes of a candidate edge.

    Attributes:
        target_id: key of the candidate image.
        distance: distance between the source and candidate positions, in meters.
        direction_change: signed change of heading from source to candidate, in (-pi, pi].
        motion_change: signed angle from the source heading to the source -> candidate motion, in (-pi, pi].
        vertical_motion: signed angle of the motion vector to the ground plane.
        world_motion_azimuth: azimuth of the motion vector in the world frame.
        rotation: unsigned angle of the relative rotation between the two cameras.
        same_sequence: candidate was captured in the same sequence as the source.
        same_merge_component: candidate belongs to the same merged connected component as the source.
        full_pano: candidate is a full 360 degree panorama.
    """

    target_id: str
    distance: float = 0.0
    direction_change: float = 0.0
    motion_change: float = 0.0
    vertical_motion: float = 0.0
    world_motion_azimuth: float = 0.0
    rotation: float = 0.0
    same_sequence: bool = False
    same_merge_component: bool = False
    full_pano: bool = False

    def __post_init__(self) -> None:
        """Reject geometry which violates the caller contract instead of correcting it."""
        if not math.isfinite(self.distance) or self.distance < 0:
            raise ValueError(f"PotentialEdge to {self.target_id} has invalid distance {self.distance}.")
        if not _is_wrapped_angle(self.direction_change):
            raise ValueError(
                f"PotentialEdge to {self.target_id} has direction change {self.direction_change} outside (-pi, pi]."
            )
        if not _is_wrapped_angle(self.motion_change):
            raise ValueError(
                f"PotentialEdge to {self.target_id} has motion change {self.motion_change} outside (-pi, pi]."
            )
        if not math.isfinite(self.rotation) or self.rotation < 0:
            raise ValueError(f"PotentialEdge to {self.target_id} has invalid rotation {self.rotation}.")
