"""Builds potential edges from the poses of a source image and its candidate neighbors."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from gtsam import Pose3

import navgraph.utils.logger as logger_utils
from navgraph.edge.edge_calculator_settings import EdgeCalculatorSettings
from navgraph.edge.potential_edge import PotentialEdge
from navgraph.utils.spatial import (
    WORLD_UP,
    angle_between_vector2,
    angle_to_plane,
    relative_rotation_angle,
    viewing_direction,
)

logger = logger_utils.get_logger()


@dataclass(frozen=True)
class ImageNode:
    """Pose and capture metadata of an image.

    Attributes:
        key: unique image key.
        wTi: camera-to-world pose in a local ENU frame, in meters.
        sequence_key: key of the capture sequence, if known.
        merge_component: id of the merged connected component, if known.
        full_pano: whether the image is a full 360 degree panorama.
        captured_at: capture timestamp, used to order sequences.
    """

    key: str
    wTi: Pose3
    sequence_key: Optional[str] = None
    merge_component: Optional[str] = None
    full_pano: bool = False
    captured_at: float = 0.0


class PotentialEdgeBuilder:
    """Derives the attributes of source -> candidate relationships needed by the edge calculator."""

    def __init__(self, settings: Optional[EdgeCalculatorSettings] = None) -> None:
        """
        Args:
            settings: settings whose max distance bounds the candidates. Defaults to EdgeCalculatorSettings().
        """
        self._settings = settings if settings is not None else EdgeCalculatorSettings()

    def build(self, source: ImageNode, candidates: Sequence[ImageNode]) -> List[PotentialEdge]:
        """Build one potential edge per candidate.

        Args:
            source: the source image.
            candidates: neighbors of the source image. The source itself and candidates beyond the settings' max
                distance are skipped.

        Returns:
            Potential edges, in candidate order.
        """
        wRs = source.wTi.rotation()
        source_position = np.asarray(source.wTi.translation(), dtype=float)
        source_direction = viewing_direction(wRs)

        potential_edges: List[PotentialEdge] = []
        for candidate in candidates:
            if candidate.key == source.key:
                continue

            motion = np.asarray(candidate.wTi.translation(), dtype=float) - source_position
            distance = float(np.linalg.norm(motion))
            if distance > self._settings.max_distance:
                continue

            wRc = candidate.wTi.rotation()
            candidate_direction = viewing_direction(wRc)

            potential_edges.append(
                PotentialEdge(
                    target_id=candidate.key,
                    distance=distance,
                    direction_change=angle_between_vector2(
                        source_direction[0], source_direction[1], candidate_direction[0], candidate_direction[1]
                    ),
                    motion_change=angle_between_vector2(source_direction[0], source_direction[1], motion[0], motion[1]),
                    vertical_motion=angle_to_plane(motion, WORLD_UP),
                    world_motion_azimuth=angle_between_vector2(1.0, 0.0, motion[0], motion[1]),
                    rotation=relative_rotation_angle(wRs, wRc),
                    same_sequence=source.sequence_key is not None and source.sequence_key == candidate.sequence_key,
                    same_merge_component=source.merge_component == candidate.merge_component,
                    full_pano=candidate.full_pano,
                )
            )

        logger.debug(
            "Built %d potential edges for %s from %d candidates.", len(potential_edges), source.key, len(candidates)
        )
        return potential_edges
