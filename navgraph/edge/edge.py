"""Directed navigation edge, the output of the edge calculator."""

from dataclasses import dataclass
from typing import Optional

from navgraph.edge.edge_direction import EdgeDirection


@dataclass(frozen=True)
class Edge:
    """A navigation link from an (implicit) source image to a target image.

    Attributes:
        target: key of the target image.
        direction: semantic direction of the link.
        world_motion_azimuth: azimuth of the source-to-target motion in the world frame, used to place
            direction arrows. None when unknown.
    """

    target: str
    direction: EdgeDirection
    world_motion_azimuth: Optional[float] = None
