"""Edge calculator: classifies candidate neighbors into directional navigation edges.

Every direction family follows the same pattern: candidates are filtered by angle, admitted through one or more
distance gates and the winner of each direction is the candidate with the smallest rank. Ranks are tuples
compared criterion by criterion, so each criterion only breaks ties left by the previous ones. Full ties are
resolved in favor of the candidate that comes first in the input.
"""

import math
from operator import itemgetter
from typing import List, Optional, Sequence, Tuple

import navgraph.utils.logger as logger_utils
from navgraph.edge.edge import Edge
from navgraph.edge.edge_calculator_directions import EdgeCalculatorDirections, StepDirection, TurnDirection
from navgraph.edge.edge_calculator_settings import EdgeCalculatorSettings
from navgraph.edge.edge_direction import EdgeDirection
from navgraph.edge.potential_edge import PotentialEdge
from navgraph.utils.spatial import angle_difference, wrap_angle

logger = logger_utils.get_logger()

RankedEdge = Tuple[tuple, PotentialEdge]


def _select(ranked: List[RankedEdge]) -> Optional[PotentialEdge]:
    """Return the potential edge with the smallest rank, the first one on ties."""
    if not ranked:
        return None
    return min(ranked, key=itemgetter(0))[1]


def _relation_rank(potential: PotentialEdge) -> tuple:
    """Candidates in the same sequence come first, then candidates in the same merge component."""
    return (not potential.same_sequence, not potential.same_merge_component)


def _is_unoccupied(angle: float, occupied_angles: Sequence[float], min_difference: float) -> bool:
    return all(abs(angle_difference(occupied, angle)) > min_difference for occupied in occupied_angles)


def _to_edge(potential: PotentialEdge, direction: EdgeDirection) -> Edge:
    return Edge(
        target=potential.target_id,
        direction=direction,
        world_motion_azimuth=potential.world_motion_azimuth,
    )


class EdgeCalculator:
    """Computes the directional edges of a source image from its potential edges.

    The calculator is stateless across calls: it only reads its settings and direction catalog, so a single
    instance can serve concurrent calls for different source images.
    """

    def __init__(
        self,
        settings: Optional[EdgeCalculatorSettings] = None,
        directions: Optional[EdgeCalculatorDirections] = None,
    ) -> None:
        """
        Args:
            settings: thresholds of all direction families. Defaults to EdgeCalculatorSettings().
            directions: direction catalog. Defaults to EdgeCalculatorDirections().
        """
        self._settings = settings if settings is not None else EdgeCalculatorSettings()
        self._directions = directions if directions is not None else EdgeCalculatorDirections()

    def __repr__(self) -> str:
        return f"EdgeCalculator(settings={self._settings}, directions={self._directions})"

    @property
    def settings(self) -> EdgeCalculatorSettings:
        return self._settings

    @property
    def directions(self) -> EdgeCalculatorDirections:
        return self._directions

    def compute_edges(
        self,
        potential_edges: Sequence[PotentialEdge],
        source_full_pano: bool = False,
        prev_id: Optional[str] = None,
        next_id: Optional[str] = None,
    ) -> List[Edge]:
        """Compute the edges of all direction families which apply to the source image.

        Args:
            potential_edges: candidates of a single source image.
            source_full_pano: whether the source image is a full panorama.
            prev_id: key of the previous image in the source's sequence, if any.
            next_id: key of the next image in the source's sequence, if any.

        Returns:
            Pano edges for a panoramic source; step, turn and perspective-to-pano edges otherwise.
        """
        if source_full_pano:
            edges = self.compute_pano_edges(potential_edges, source_full_pano=True)
        else:
            edges = (
                self.compute_step_edges(potential_edges, prev_id=prev_id, next_id=next_id)
                + self.compute_turn_edges(potential_edges)
                + self.compute_perspective_to_pano_edges(potential_edges, source_full_pano=False)
            )

        logger.debug("Computed %d edges from %d potential edges.", len(edges), len(potential_edges))
        return edges

    def compute_step_edges(
        self,
        potential_edges: Sequence[PotentialEdge],
        prev_id: Optional[str] = None,
        next_id: Optional[str] = None,
    ) -> List[Edge]:
        """Compute at most one edge for each step direction.

        Sequence neighbors that follow the step motion but turned too much are kept as fallbacks for directions
        that use them, and are only chosen when no regular candidate exists.

        Args:
            potential_edges: candidates of a single perspective source image.
            prev_id: key of the previous image in the source's sequence, if any.
            next_id: key of the next image in the source's sequence, if any.

        Returns:
            Step edges, in catalog order.
        """
        sequence_neighbors = {key for key in (prev_id, next_id) if key is not None}
        step_edges: List[Edge] = []

        for step in self._directions.steps.values():
            eligible: List[RankedEdge] = []
            fallbacks: List[RankedEdge] = []

            for potential in potential_edges:
                if potential.full_pano or potential.distance > self._settings.step_max_distance:
                    continue

                drift = self._step_drift(step, potential)
                if drift > self._settings.step_max_drift:
                    continue

                rank = _relation_rank(potential) + (
                    abs(potential.distance - self._settings.step_preferred_distance),
                    drift,
                    potential.rotation,
                )

                if abs(potential.direction_change) <= self._settings.step_max_direction_change:
                    eligible.append((rank, potential))
                elif step.use_fallback and potential.target_id in sequence_neighbors:
                    fallbacks.append((rank, potential))

            winner = _select(eligible) or _select(fallbacks)
            if winner is not None:
                step_edges.append(_to_edge(winner, step.direction))

        return step_edges

    def compute_turn_edges(self, potential_edges: Sequence[PotentialEdge]) -> List[Edge]:
        """Compute at most one edge for each turn direction (left, right and u-turn).

        A candidate is admitted for a turn either through the generic path, when its heading change lies in the
        turn's angular window and it is within the turn distance, or through the rig path, when it is a very close
        neighbor rotated at least the min rig angle towards the turn side. Among admitted candidates the winner
        prefers the same sequence, the same merge component and the smallest distance. Remaining ties go to rig
        candidates with the smallest heading change, then to candidates whose motion is closest to the turn's
        ideal motion.

        Args:
            potential_edges: candidates of a single source image, in any order.

        Returns:
            Turn edges, in catalog order. Turns without an admitted candidate produce no edge.
        """
        turn_edges: List[Edge] = []

        for turn in self._directions.turns.values():
            admitted: List[RankedEdge] = []

            for potential in potential_edges:
                if self._is_rig_turn(turn, potential):
                    last_criteria = (0, abs(potential.direction_change))
                elif self._is_generic_turn(turn, potential):
                    last_criteria = (1, self._motion_deviation(turn.motion_change, potential.motion_change))
                else:
                    continue

                rank = _relation_rank(potential) + (potential.distance,) + last_criteria
                admitted.append((rank, potential))

            winner = _select(admitted)
            if winner is not None:
                turn_edges.append(_to_edge(winner, turn.direction))

        return turn_edges

    def compute_perspective_to_pano_edges(
        self, potential_edges: Sequence[PotentialEdge], source_full_pano: bool = False
    ) -> List[Edge]:
        """Compute at most one pano edge from a perspective image to a nearby full panorama.

        Args:
            potential_edges: candidates of a single source image.
            source_full_pano: whether the source image is a full panorama, in which case there is no edge.

        Returns:
            A list with zero or one pano edge.
        """
        if source_full_pano:
            return []

        candidates: List[RankedEdge] = []
        for potential in potential_edges:
            if not potential.full_pano or not self._in_pano_distance_band(potential):
                continue

            rank = _relation_rank(potential) + (
                abs(potential.distance - self._settings.pano_preferred_distance),
                abs(potential.motion_change),
            )
            candidates.append((rank, potential))

        winner = _select(candidates)
        if winner is None:
            return []
        return [_to_edge(winner, EdgeDirection.PANO)]

    def compute_pano_edges(
        self, potential_edges: Sequence[PotentialEdge], source_full_pano: bool = True
    ) -> List[Edge]:
        """Compute the edges of a full panorama.

        The horizon is divided into `pano_max_items` sectors. Each sector gets at most one pano edge to a
        panorama moving in that direction. Sectors without a panorama are filled with step edges to perspective
        images, at most one per pano direction, avoiding motion directions already covered by other edges.

        Args:
            potential_edges: candidates of a single source image.
            source_full_pano: whether the source image is a full panorama. Perspective sources have no pano edges.

        Returns:
            Pano edges in sector order, followed by step edges.
        """
        if not source_full_pano:
            return []

        potential_panos: List[PotentialEdge] = []
        potential_steps: List[Tuple[EdgeDirection, PotentialEdge]] = []

        for potential in potential_edges:
            if potential.distance > self._settings.pano_max_distance:
                continue

            if potential.full_pano:
                if potential.distance >= self._settings.pano_min_distance:
                    potential_panos.append(potential)
                continue

            direction = self._pano_step_direction(potential)
            if direction is not None:
                potential_steps.append((direction, potential))

        max_items = int(self._settings.pano_max_items)
        max_rotation_difference = math.pi / max_items

        pano_edges: List[Edge] = []
        occupied_angles: List[float] = []
        step_angles: List[float] = []

        for index in range(max_items):
            rotation = wrap_angle(2 * math.pi * index / max_items)

            candidates: List[RankedEdge] = []
            for potential in potential_panos:
                motion_difference = abs(angle_difference(rotation, potential.motion_change))
                if motion_difference > max_rotation_difference:
                    continue
                if not _is_unoccupied(potential.motion_change, occupied_angles, max_rotation_difference):
                    continue

                rank = _relation_rank(potential) + (
                    abs(potential.distance - self._settings.pano_preferred_distance),
                    motion_difference,
                )
                candidates.append((rank, potential))

            winner = _select(candidates)
            if winner is None:
                step_angles.append(rotation)
                continue

            occupied_angles.append(winner.motion_change)
            pano_edges.append(_to_edge(winner, EdgeDirection.PANO))

        occupied_step_angles = {direction: [] for direction in self._directions.panos}
        occupied_step_angles[EdgeDirection.PANO] = occupied_angles

        for step_angle in step_angles:
            occupations: List[Tuple[EdgeDirection, PotentialEdge]] = []

            for pano in self._directions.panos.values():
                all_occupied_angles = (
                    occupied_step_angles[EdgeDirection.PANO]
                    + occupied_step_angles[pano.direction]
                    + occupied_step_angles[pano.prev]
                    + occupied_step_angles[pano.next]
                )

                candidates = []
                for direction, potential in potential_steps:
                    if direction != pano.direction:
                        continue

                    motion_difference = abs(angle_difference(step_angle, potential.motion_change))
                    if motion_difference > max_rotation_difference:
                        continue
                    if not _is_unoccupied(potential.motion_change, all_occupied_angles, max_rotation_difference):
                        continue

                    rank = (
                        abs(potential.distance - self._settings.pano_preferred_distance),
                        motion_difference,
                    )
                    candidates.append((rank, potential))

                winner = _select(candidates)
                if winner is not None:
                    occupations.append((pano.direction, winner))
                    pano_edges.append(_to_edge(winner, pano.direction))

            for direction, winner in occupations:
                occupied_step_angles[direction].append(winner.motion_change)

        return pano_edges

    def _step_drift(self, step: StepDirection, potential: PotentialEdge) -> float:
        """Largest of the motion deviation from the step and the heading deviation from that motion."""
        motion_difference = angle_difference(step.motion_change, potential.motion_change)
        direction_motion_difference = angle_difference(potential.direction_change, motion_difference)
        return max(abs(motion_difference), abs(direction_motion_difference))

    def _is_generic_turn(self, turn: TurnDirection, potential: PotentialEdge) -> bool:
        if potential.distance > self._settings.turn_max_distance:
            return False
        direction_difference = angle_difference(turn.direction_change, potential.direction_change)
        return abs(direction_difference) <= self._settings.turn_max_direction_change

    def _is_rig_turn(self, turn: TurnDirection, potential: PotentialEdge) -> bool:
        # Rig cameras sit at nearly the same position, rotated by less than a full turn.
        if turn.direction == EdgeDirection.TURN_U:
            return False
        if potential.distance > min(self._settings.turn_max_rig_distance, self._settings.turn_max_distance):
            return False

        direction_change = potential.direction_change
        return (
            abs(direction_change) >= self._settings.turn_min_rig_direction_change
            and direction_change * turn.direction_change > 0
            and abs(direction_change) < abs(turn.direction_change)
        )

    @staticmethod
    def _motion_deviation(ideal_motion_change: Optional[float], motion_change: float) -> float:
        if ideal_motion_change is None:
            return 0.0
        return abs(angle_difference(ideal_motion_change, motion_change))

    def _in_pano_distance_band(self, potential: PotentialEdge) -> bool:
        return self._settings.pano_min_distance <= potential.distance <= self._settings.pano_max_distance

    def _pano_step_direction(self, potential: PotentialEdge) -> Optional[EdgeDirection]:
        """Pano direction matching the turn of a perspective candidate relative to its own motion."""
        turn = angle_difference(potential.direction_change, potential.motion_change)
        for pano in self._directions.panos.values():
            turn_change = angle_difference(pano.direction_change, turn)
            if abs(turn_change) <= self._settings.pano_max_step_turn_change:
                return pano.direction
        return None
