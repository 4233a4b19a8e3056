"""Unit tests for the turn edges of the edge calculator."""

import math
import unittest
from dataclasses import replace

import numpy as np

from navgraph.edge.edge_calculator import EdgeCalculator
from navgraph.edge.edge_calculator_directions import EdgeCalculatorDirections
from navgraph.edge.edge_calculator_settings import EdgeCalculatorSettings
from navgraph.edge.edge_direction import EdgeDirection, TURN_DIRECTIONS
from navgraph.edge.potential_edge import PotentialEdge


def create_potential_edge(key: str = "pkey", **kwargs) -> PotentialEdge:
    """Potential edge with all geometry zeroed, unless overridden."""
    return PotentialEdge(target_id=key, **kwargs)


class TestComputeTurnEdgesSingleCandidate(unittest.TestCase):
    """Classification of a single candidate within the turn distance."""

    def setUp(self) -> None:
        self.settings = EdgeCalculatorSettings()
        self.edge_calculator = EdgeCalculator(self.settings, EdgeCalculatorDirections())
        self.potential_edge = create_potential_edge(distance=self.settings.turn_max_distance / 2)

    def _assert_single_turn(self, direction_change: float, expected_direction: EdgeDirection) -> None:
        potential_edge = replace(self.potential_edge, direction_change=direction_change)

        turn_edges = self.edge_calculator.compute_turn_edges([potential_edge])

        self.assertEqual(len(turn_edges), 1)
        self.assertEqual(turn_edges[0].target, potential_edge.target_id)
        self.assertEqual(turn_edges[0].direction, expected_direction)

    def test_turn_left(self) -> None:
        self._assert_single_turn(math.pi / 2, EdgeDirection.TURN_LEFT)

    def test_turn_right(self) -> None:
        self._assert_single_turn(-math.pi / 2, EdgeDirection.TURN_RIGHT)

    def test_u_turn(self) -> None:
        self._assert_single_turn(math.pi, EdgeDirection.TURN_U)

    def test_no_turn_straight_ahead(self) -> None:
        self.assertEqual(self.edge_calculator.compute_turn_edges([self.potential_edge]), [])

    def test_no_turn_beyond_max_distance(self) -> None:
        potential_edge = replace(
            self.potential_edge, direction_change=math.pi / 2, distance=self.settings.turn_max_distance + 1
        )
        self.assertEqual(self.edge_calculator.compute_turn_edges([potential_edge]), [])

    def test_turn_left_at_window_edge(self) -> None:
        """Heading changes inside the angular window around the turn are accepted."""
        self._assert_single_turn(math.pi / 2 + 0.9 * self.settings.turn_max_direction_change, EdgeDirection.TURN_LEFT)

    def test_no_turn_outside_window(self) -> None:
        direction_change = math.pi / 2 - 1.1 * self.settings.turn_max_direction_change
        potential_edge = replace(self.potential_edge, direction_change=direction_change)
        self.assertEqual(self.edge_calculator.compute_turn_edges([potential_edge]), [])

    def test_empty_input(self) -> None:
        self.assertEqual(self.edge_calculator.compute_turn_edges([]), [])

    def test_edge_carries_world_motion_azimuth(self) -> None:
        potential_edge = replace(self.potential_edge, direction_change=math.pi / 2, world_motion_azimuth=0.3)
        turn_edges = self.edge_calculator.compute_turn_edges([potential_edge])
        self.assertAlmostEqual(turn_edges[0].world_motion_azimuth, 0.3)


class TestComputeTurnEdgesTieBreak(unittest.TestCase):
    """Selection among two candidates admitted for the same turn."""

    def setUp(self) -> None:
        self.settings = EdgeCalculatorSettings()
        self.directions = EdgeCalculatorDirections()
        self.edge_calculator = EdgeCalculator(self.settings, self.directions)

        self.potential_edge1 = create_potential_edge("pkey1", distance=self.settings.turn_max_rig_distance * 2)
        self.potential_edge2 = create_potential_edge("pkey2", distance=self.settings.turn_max_rig_distance * 2)

    def _assert_winner(self, expected: PotentialEdge, expected_direction: EdgeDirection = EdgeDirection.TURN_LEFT):
        turn_edges = self.edge_calculator.compute_turn_edges([self.potential_edge1, self.potential_edge2])

        self.assertEqual(len(turn_edges), 1)
        self.assertEqual(turn_edges[0].target, expected.target_id)
        self.assertEqual(turn_edges[0].direction, expected_direction)

    def test_turn_left_same_sequence(self) -> None:
        self.potential_edge1 = replace(self.potential_edge1, direction_change=math.pi / 2, same_sequence=False)
        self.potential_edge2 = replace(self.potential_edge2, direction_change=math.pi / 2, same_sequence=True)
        self._assert_winner(self.potential_edge2)

    def test_turn_left_same_merge_component(self) -> None:
        self.potential_edge1 = replace(self.potential_edge1, direction_change=math.pi / 2, same_merge_component=False)
        self.potential_edge2 = replace(self.potential_edge2, direction_change=math.pi / 2, same_merge_component=True)
        self._assert_winner(self.potential_edge2)

    def test_same_sequence_precedes_merge_component(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1, direction_change=math.pi / 2, same_sequence=True, same_merge_component=False
        )
        self.potential_edge2 = replace(
            self.potential_edge2, direction_change=math.pi / 2, same_sequence=False, same_merge_component=True
        )
        self._assert_winner(self.potential_edge1)

    def test_same_sequence_precedes_distance(self) -> None:
        self.potential_edge1 = replace(self.potential_edge1, direction_change=math.pi / 2, distance=2)
        self.potential_edge2 = replace(
            self.potential_edge2, direction_change=math.pi / 2, distance=10, same_sequence=True
        )
        self._assert_winner(self.potential_edge2)

    def test_turn_left_smallest_distance(self) -> None:
        self.potential_edge1 = replace(self.potential_edge1, direction_change=math.pi / 2, distance=5)
        self.potential_edge2 = replace(self.potential_edge2, direction_change=math.pi / 2, distance=3)
        self._assert_winner(self.potential_edge2)

    def test_turn_left_smallest_motion_difference(self) -> None:
        motion_change = self.directions.ideal_motion_change(EdgeDirection.TURN_LEFT)

        self.potential_edge1 = replace(
            self.potential_edge1, direction_change=math.pi / 2, motion_change=0.9 * motion_change
        )
        self.potential_edge2 = replace(self.potential_edge2, direction_change=math.pi / 2, motion_change=motion_change)
        self._assert_winner(self.potential_edge2)

    def test_turn_left_rig_smallest_direction_change(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=1.2 * self.settings.turn_min_rig_direction_change,
        )
        self.potential_edge2 = replace(
            self.potential_edge2,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=1.1 * self.settings.turn_min_rig_direction_change,
        )
        self._assert_winner(self.potential_edge2)

    def test_turn_right_rig_smallest_direction_change(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=-1.2 * self.settings.turn_min_rig_direction_change,
        )
        self.potential_edge2 = replace(
            self.potential_edge2,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=-1.1 * self.settings.turn_min_rig_direction_change,
        )
        self._assert_winner(self.potential_edge2, EdgeDirection.TURN_RIGHT)

    def test_no_turn_rig_too_small_angle(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=-0.9 * self.settings.turn_min_rig_direction_change,
        )

        turn_edges = self.edge_calculator.compute_turn_edges([self.potential_edge1, self.potential_edge2])

        self.assertEqual(len(turn_edges), 0)

    def test_no_rig_turn_beyond_rig_distance(self) -> None:
        """Small rig angles are only accepted for very close candidates."""
        self.potential_edge1 = replace(
            self.potential_edge1,
            distance=1.5 * self.settings.turn_max_rig_distance,
            direction_change=1.1 * self.settings.turn_min_rig_direction_change,
        )
        self.assertEqual(self.edge_calculator.compute_turn_edges([self.potential_edge1]), [])

    def test_no_rig_turn_beyond_max_distance(self) -> None:
        """The turn max distance bounds the rig path as well."""
        settings = EdgeCalculatorSettings(turn_max_distance=0.5, turn_max_rig_distance=1.0)
        edge_calculator = EdgeCalculator(settings)
        min_rig_direction_change = settings.turn_min_rig_direction_change
        potential_edge = create_potential_edge(distance=0.8, direction_change=1.1 * min_rig_direction_change)

        self.assertEqual(edge_calculator.compute_turn_edges([potential_edge]), [])
        self.assertEqual(
            [edge.direction for edge in edge_calculator.compute_turn_edges([replace(potential_edge, distance=0.4)])],
            [EdgeDirection.TURN_LEFT],
        )

    def test_rig_candidate_precedes_generic_candidate_on_full_tie(self) -> None:
        distance = 0.5 * self.settings.turn_max_rig_distance
        self.potential_edge1 = replace(self.potential_edge1, distance=distance, direction_change=math.pi / 2)
        self.potential_edge2 = replace(
            self.potential_edge2,
            distance=distance,
            direction_change=1.1 * self.settings.turn_min_rig_direction_change,
        )
        self._assert_winner(self.potential_edge2)

    def test_closer_generic_candidate_precedes_rig_candidate(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1, distance=0.2 * self.settings.turn_max_rig_distance, direction_change=math.pi / 2
        )
        self.potential_edge2 = replace(
            self.potential_edge2,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=1.1 * self.settings.turn_min_rig_direction_change,
        )
        self._assert_winner(self.potential_edge1)

    def test_rig_path_does_not_apply_to_u_turn(self) -> None:
        self.potential_edge1 = replace(
            self.potential_edge1,
            distance=0.5 * self.settings.turn_max_rig_distance,
            direction_change=1.1 * self.settings.turn_min_rig_direction_change,
        )
        turn_edges = self.edge_calculator.compute_turn_edges([self.potential_edge1])
        self.assertEqual([edge.direction for edge in turn_edges], [EdgeDirection.TURN_LEFT])

    def test_full_tie_keeps_input_order(self) -> None:
        self.potential_edge1 = replace(self.potential_edge1, direction_change=math.pi / 2)
        self.potential_edge2 = replace(self.potential_edge2, direction_change=math.pi / 2)
        self._assert_winner(self.potential_edge1)


class TestComputeTurnEdgesProperties(unittest.TestCase):
    """Properties which hold for any input."""

    def setUp(self) -> None:
        self.edge_calculator = EdgeCalculator()
        rng = np.random.default_rng(seed=0)

        self.potential_edges = [
            create_potential_edge(
                f"pkey{index}",
                distance=float(rng.uniform(0, 20)),
                direction_change=float(rng.uniform(-math.pi, math.pi)),
                motion_change=float(rng.uniform(-math.pi, math.pi)),
                same_sequence=bool(rng.integers(2)),
                same_merge_component=bool(rng.integers(2)),
            )
            for index in range(200)
        ]

    def test_all_three_turns(self) -> None:
        turn_edges = self.edge_calculator.compute_turn_edges(self.potential_edges)
        self.assertEqual([edge.direction for edge in turn_edges], list(TURN_DIRECTIONS))

    def test_at_most_one_edge_per_direction(self) -> None:
        turn_edges = self.edge_calculator.compute_turn_edges(self.potential_edges)
        directions = [edge.direction for edge in turn_edges]
        self.assertEqual(len(directions), len(set(directions)))

    def test_targets_come_from_input(self) -> None:
        target_ids = {potential_edge.target_id for potential_edge in self.potential_edges}
        for edge in self.edge_calculator.compute_turn_edges(self.potential_edges):
            self.assertIn(edge.target, target_ids)

    def test_idempotent(self) -> None:
        first = self.edge_calculator.compute_turn_edges(self.potential_edges)
        second = self.edge_calculator.compute_turn_edges(self.potential_edges)
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
