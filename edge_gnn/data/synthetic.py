"""
Synthetic edge-regression graphs.

Inputs:
    - a seeded torch.Generator plus size/threshold settings from DataConfig.
Outputs:
    - lists of torch_geometric.data.Data graphs (x, edge_index, edge_attr, edge_weight, y).
Purpose:
    Deterministic random graphs for training demos and tests. Every draw goes through
    the generator passed in, never the global RNG.
"""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

import torch
from torch_geometric.data import Data

from ..errors import ConfigError
from .graph import make_graph


def _compute_split_indices(n: int, val: float, seed: int = 42):
    """Return index lists for train/val."""

    ids = list(range(n))
    random.Random(seed).shuffle(ids)
    val_n = int(val * n)
    return ids[val_n:], ids[:val_n]


class SyntheticGraphGenerator:
    """Random directed graphs whose edges point from a higher to a lower node id."""

    def __init__(
        self,
        generator: torch.Generator,
        mean_nodes: float = 30.0,
        std_nodes: float = 3.0,
        node_width: int = 3,
        edge_threshold: float = 0.7,
    ):
        """
        Args:
            generator: seeded torch.Generator; the only randomness source.
            mean_nodes / std_nodes: normal distribution of graph sizes.
            node_width: number of node features (edge features have the same width).
            edge_threshold: an edge i -> j (i > j) exists where a uniform draw exceeds this.
        """

        if node_width < 1:
            raise ConfigError(f"node_width cannot be less than one, got {node_width}")
        if not 0.0 <= edge_threshold < 1.0:
            raise ConfigError(f"edge_threshold must lie in [0, 1), got {edge_threshold}")
        if std_nodes < 0.0:
            raise ConfigError(f"std_nodes cannot be negative, got {std_nodes}")
        self.generator = generator
        self.mean_nodes = mean_nodes
        self.std_nodes = std_nodes
        self.node_width = node_width
        self.edge_threshold = edge_threshold

    @property
    def edge_width(self) -> int:
        return self.node_width

    def sample_size(self) -> int:
        draw = torch.normal(self.mean_nodes, self.std_nodes, size=(1,), generator=self.generator)
        return max(2, int(torch.round(draw).item()))

    def sample(self, num_nodes: Optional[int] = None) -> Data:
        n = self.sample_size() if num_nodes is None else num_nodes
        node_attr = torch.rand((n, self.node_width), generator=self.generator)
        adjacency = torch.rand((n, n), generator=self.generator)
        edge_index = torch.argwhere(adjacency.tril(-1) > self.edge_threshold).t().contiguous()
        # Edge features: difference between endpoint features.
        edge_attr = node_attr.index_select(0, edge_index[0]) - node_attr.index_select(0, edge_index[1])
        num_edges = edge_index.size(1)
        y = torch.rand((num_edges, 1), generator=self.generator)
        edge_weight = torch.ones((num_edges, 1))
        return make_graph(node_attr, edge_index, edge_attr, edge_weight=edge_weight, y=y)

    def make_dataset(self, num_graphs: int) -> List[Data]:
        if num_graphs < 1:
            raise ConfigError(f"num_graphs cannot be less than one, got {num_graphs}")
        return [self.sample() for _ in range(num_graphs)]


def build_splits(graphs: List[Data], val: float, seed: int = 42) -> Tuple[List[Data], List[Data]]:
    """Split a list of graphs into train/val lists."""

    if not 0.0 <= val < 1.0:
        raise ConfigError(f"val split must lie in [0, 1), got {val}")
    train_ids, val_ids = _compute_split_indices(len(graphs), val, seed)
    return [graphs[i] for i in train_ids], [graphs[i] for i in val_ids]
