"""Computes the navigation edges of every image in a scene and assembles them into a graph.

Neighbor discovery is done elsewhere: the builder receives, for each image key, the keys of its candidate
neighbors. Sequence neighbors are always candidates, so steps along a sequence can fall back on them.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
from dask.distributed import Client

import navgraph.utils.logger as logger_utils
from navgraph.edge.edge import Edge
from navgraph.edge.edge_calculator import EdgeCalculator
from navgraph.edge.potential_edge_builder import ImageNode, PotentialEdgeBuilder

logger = logger_utils.get_logger()

SequenceNeighbors = Dict[str, Tuple[Optional[str], Optional[str]]]


class EdgeGraphBuilder:
    """Runs the edge calculator for every image of a scene, locally or on a Dask cluster."""

    def __init__(
        self,
        edge_calculator: Optional[EdgeCalculator] = None,
        potential_edge_builder: Optional[PotentialEdgeBuilder] = None,
    ) -> None:
        """
        Args:
            edge_calculator: calculator applied to each image. Defaults to EdgeCalculator().
            potential_edge_builder: builder of the calculator input. Defaults to a builder sharing the
                calculator's settings.
        """
        self._edge_calculator = edge_calculator if edge_calculator is not None else EdgeCalculator()
        if potential_edge_builder is None:
            potential_edge_builder = PotentialEdgeBuilder(self._edge_calculator.settings)
        self._potential_edge_builder = potential_edge_builder

    def __repr__(self) -> str:
        return f"EdgeGraphBuilder(edge_calculator={self._edge_calculator})"

    @staticmethod
    def sequence_neighbors(nodes: Sequence[ImageNode]) -> SequenceNeighbors:
        """Find the previous and next image of each image in its sequence, ordered by capture time.

        Images without a sequence key have no sequence neighbors.
        """
        sequences: Dict[str, List[ImageNode]] = defaultdict(list)
        for node in nodes:
            if node.sequence_key is not None:
                sequences[node.sequence_key].append(node)

        neighbors: SequenceNeighbors = {node.key: (None, None) for node in nodes}
        for sequence in sequences.values():
            ordered = sorted(sequence, key=lambda node: node.captured_at)
            for index, node in enumerate(ordered):
                prev_key = ordered[index - 1].key if index > 0 else None
                next_key = ordered[index + 1].key if index + 1 < len(ordered) else None
                neighbors[node.key] = (prev_key, next_key)

        return neighbors

    def compute_node_edges(
        self,
        node: ImageNode,
        candidates: Sequence[ImageNode],
        prev_id: Optional[str] = None,
        next_id: Optional[str] = None,
    ) -> List[Edge]:
        """Compute the edges of a single image.

        Args:
            node: the source image.
            candidates: candidate neighbors of the source image.
            prev_id: key of the previous image in the source's sequence, if any.
            next_id: key of the next image in the source's sequence, if any.

        Returns:
            Edges of all direction families which apply to the source image.
        """
        potential_edges = self._potential_edge_builder.build(node, candidates)
        return self._edge_calculator.compute_edges(
            potential_edges, source_full_pano=node.full_pano, prev_id=prev_id, next_id=next_id
        )

    def compute_all_edges(
        self, nodes: Sequence[ImageNode], neighbors: Mapping[str, Sequence[str]]
    ) -> Dict[str, List[Edge]]:
        """Compute the edges of every image, one image after the other.

        Args:
            nodes: all images of the scene.
            neighbors: candidate neighbor keys per image key. Images missing from the mapping only have their
                sequence neighbors as candidates.

        Returns:
            Edges per image key.

        Raises:
            KeyError: if a neighbor key does not belong to any of the nodes.
        """
        edges_by_key = {
            node.key: self.compute_node_edges(node, candidates, prev_id, next_id)
            for node, candidates, prev_id, next_id in self._node_inputs(nodes, neighbors)
        }
        logger.info("Computed %d edges for %d images.", sum(map(len, edges_by_key.values())), len(edges_by_key))
        return edges_by_key

    def compute_all_edges_as_futures(
        self, client: Client, nodes: Sequence[ImageNode], neighbors: Mapping[str, Sequence[str]]
    ) -> Dict[str, List[Edge]]:
        """Compute the edges of every image on a Dask cluster, one task per image.

        Args:
            client: Dask client of the cluster.
            nodes: all images of the scene.
            neighbors: candidate neighbor keys per image key.

        Returns:
            Edges per image key, identical to the result of `compute_all_edges`.
        """

        def apply_edge_graph_builder(
            builder: EdgeGraphBuilder,
            node: ImageNode,
            candidates: List[ImageNode],
            prev_id: Optional[str],
            next_id: Optional[str],
        ) -> List[Edge]:
            return builder.compute_node_edges(node, candidates, prev_id=prev_id, next_id=next_id)

        builder_future = client.scatter(self, broadcast=True)

        edge_futures = {
            node.key: client.submit(apply_edge_graph_builder, builder_future, node, candidates, prev_id, next_id)
            for node, candidates, prev_id, next_id in self._node_inputs(nodes, neighbors)
        }
        edges_by_key = dict(zip(edge_futures.keys(), client.gather(list(edge_futures.values()))))

        logger.info("Computed %d edges for %d images.", sum(map(len, edges_by_key.values())), len(edges_by_key))
        return edges_by_key

    @staticmethod
    def to_graph(edges_by_key: Mapping[str, Sequence[Edge]]) -> nx.MultiDiGraph:
        """Assemble the navigation graph.

        Every image key is a node, also when it has no edges. Graph edges carry the `direction` and
        `world_motion_azimuth` of the navigation edge and are keyed by direction.
        """
        graph = nx.MultiDiGraph()
        graph.add_nodes_from(edges_by_key.keys())
        for source, edges in edges_by_key.items():
            for edge in edges:
                graph.add_edge(
                    source,
                    edge.target,
                    key=edge.direction,
                    direction=edge.direction,
                    world_motion_azimuth=edge.world_motion_azimuth,
                )
        return graph

    def _node_inputs(self, nodes: Sequence[ImageNode], neighbors: Mapping[str, Sequence[str]]):
        """Yield (node, candidates, prev_id, next_id) for every node."""
        nodes_by_key = {node.key: node for node in nodes}
        sequence_neighbors = self.sequence_neighbors(nodes)

        for node in nodes:
            prev_id, next_id = sequence_neighbors[node.key]
            candidate_keys = list(neighbors.get(node.key, ()))
            for key in (prev_id, next_id):
                if key is not None and key not in candidate_keys:
                    candidate_keys.append(key)

            missing = [key for key in candidate_keys if key not in nodes_by_key]
            if missing:
                raise KeyError(f"Unknown neighbor keys {missing} for image {node.key}.")

            yield node, [nodes_by_key[key] for key in candidate_keys], prev_id, next_id
