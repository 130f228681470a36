"""
Two-hop graph convolution.

Inputs:
    - edge_index: connectivity [2, E] (row 0 = source, row 1 = target)
    - node_attr: node features [N, F_in]
    - edge_attr: edge features [E, F_edge]
    - edge_weight: per-edge gate [E, 1] or [E]
    - initial_node_attr: features reintroduced at every layer [N, F_init]
Outputs:
    - node embeddings [N, F_out]
Purpose:
    Aggregates 1-hop and 2-hop messages along both edge directions and maps
    [initial, node, in1, out1, in2, out2] through a DenseBlock.
"""

from typing import Optional, Protocol, Sequence

import torch
import torch.nn as nn
from torch_geometric.utils import scatter

from ..errors import ConfigError, EdgeIndexError, ShapeError
from .dense import ActivationSpec, DenseBlock, check_hidden_sizes


class MessageFunction(Protocol):
    def __call__(
        self,
        edge_index: torch.Tensor,
        node_attr: torch.Tensor,
        edge_attr: torch.Tensor,
        edge_weight: torch.Tensor,
        hop: int,
    ) -> torch.Tensor: ...


class AggregateFunction(Protocol):
    def __call__(self, edge_index: torch.Tensor, messages: torch.Tensor, num_nodes: int) -> torch.Tensor: ...


def check_edge_index(edge_index: torch.Tensor, num_nodes: int) -> None:
    """Raise EdgeIndexError unless edge_index is a [2, E] integer tensor with entries in [0, num_nodes)."""

    if edge_index.dim() != 2 or edge_index.size(0) != 2:
        raise EdgeIndexError(f"edge_index must have shape [2, E], got {list(edge_index.shape)}")
    if edge_index.dtype not in (torch.int32, torch.int64):
        raise EdgeIndexError(f"edge_index must be an integer tensor, got {edge_index.dtype}")
    if edge_index.numel() == 0:
        return
    low = int(edge_index.min())
    high = int(edge_index.max())
    if low < 0 or high >= num_nodes:
        raise EdgeIndexError(f"edge_index entries must lie in [0, {num_nodes}), found range [{low}, {high}]")


class TwoHopMessage:
    """Hop 1: w * [x_j || e]. Later hops: w * x_j, since x_j already carries the edge features."""

    def __call__(
        self,
        edge_index: torch.Tensor,
        node_attr: torch.Tensor,
        edge_attr: torch.Tensor,
        edge_weight: torch.Tensor,
        hop: int,
    ) -> torch.Tensor:
        source_nodes = edge_index[0]
        node_attr_j = node_attr.index_select(0, source_nodes)
        if edge_weight.dim() == 1:
            edge_weight = edge_weight.unsqueeze(-1)
        if hop == 1:
            return edge_weight * torch.cat([node_attr_j, edge_attr], dim=-1)
        return edge_weight * node_attr_j


class ScatterSumAggregate:
    """Sum messages onto their target node; nodes without incoming edges get zeros."""

    def __call__(self, edge_index: torch.Tensor, messages: torch.Tensor, num_nodes: int) -> torch.Tensor:
        return scatter(messages, edge_index[1], dim=0, dim_size=num_nodes, reduce="sum")


class GraphConv(nn.Module):
    """Two-hop, bidirectional message passing followed by a DenseBlock."""

    def __init__(
        self,
        input_node_width: int,
        hidden_sizes: Sequence[int],
        output_node_width: int,
        initial_node_width: int,
        edge_width: int,
        dropout_prob: float = 0.0,
        use_normalization: bool = True,
        activation: ActivationSpec = "tanh",
        end_activation: ActivationSpec = "identity",
        message_fn: Optional[MessageFunction] = None,
        aggregate_fn: Optional[AggregateFunction] = None,
    ):
        super().__init__()
        widths = {
            "input_node_width": input_node_width,
            "output_node_width": output_node_width,
            "initial_node_width": initial_node_width,
            "edge_width": edge_width,
        }
        for name, value in widths.items():
            if value < 1:
                raise ConfigError(f"GraphConv: {name} cannot be less than one, got {value}.")
        check_hidden_sizes("GraphConv", hidden_sizes)

        self.input_node_width = input_node_width
        self.output_node_width = output_node_width
        self.initial_node_width = initial_node_width
        self.edge_width = edge_width
        self.message_fn = message_fn if message_fn is not None else TwoHopMessage()
        self.aggregate_fn = aggregate_fn if aggregate_fn is not None else ScatterSumAggregate()

        # initial + node + 4 aggregated blocks of (node + edge) width.
        self.mlp = DenseBlock(
            5 * input_node_width + initial_node_width + 4 * edge_width,
            hidden_sizes,
            output_node_width,
            dropout_prob=dropout_prob,
            use_normalization=use_normalization,
            activation=activation,
            end_activation=end_activation,
        )

    def forward(
        self,
        edge_index: torch.Tensor,
        node_attr: torch.Tensor,
        edge_attr: torch.Tensor,
        edge_weight: torch.Tensor,
        initial_node_attr: torch.Tensor,
    ) -> torch.Tensor:
        self._check_inputs(edge_index, node_attr, edge_attr, edge_weight, initial_node_attr)
        reversed_edge_index = edge_index.flip(0)

        one_hop_incoming = self.propagate(edge_index, node_attr, edge_attr, edge_weight, hop=1)
        one_hop_outgoing = self.propagate(reversed_edge_index, node_attr, edge_attr, edge_weight, hop=1)

        two_hop_incoming = self.propagate(edge_index, one_hop_incoming, edge_attr, edge_weight, hop=2)
        two_hop_outgoing = self.propagate(reversed_edge_index, one_hop_outgoing, edge_attr, edge_weight, hop=2)

        combined = torch.cat(
            [
                initial_node_attr,
                node_attr,
                one_hop_incoming,
                one_hop_outgoing,
                two_hop_incoming,
                two_hop_outgoing,
            ],
            dim=-1,
        )
        if combined.size(-1) != self.mlp.input_size:
            raise ShapeError(
                f"GraphConv: combined feature width {combined.size(-1)} does not match the configured "
                f"input width {self.mlp.input_size} (node={node_attr.size(-1)}, edge={edge_attr.size(-1)}, "
                f"initial={initial_node_attr.size(-1)})"
            )
        return self.mlp(combined)

    def propagate(
        self,
        edge_index: torch.Tensor,
        node_attr: torch.Tensor,
        edge_attr: torch.Tensor,
        edge_weight: torch.Tensor,
        hop: int,
    ) -> torch.Tensor:
        messages = self.message_fn(edge_index, node_attr, edge_attr, edge_weight, hop)
        return self.aggregate_fn(edge_index, messages, node_attr.size(0))

    def _check_inputs(self, edge_index, node_attr, edge_attr, edge_weight, initial_node_attr) -> None:
        if node_attr.dim() != 2:
            raise ShapeError(f"node_attr must be [N, F], got {list(node_attr.shape)}")
        if initial_node_attr.dim() != 2 or initial_node_attr.size(0) != node_attr.size(0):
            raise ShapeError(
                f"initial_node_attr must be [{node_attr.size(0)}, F_init], got {list(initial_node_attr.shape)}"
            )
        check_edge_index(edge_index, node_attr.size(0))
        num_edges = edge_index.size(1)
        if edge_attr.dim() != 2 or edge_attr.size(0) != num_edges:
            raise ShapeError(f"edge_attr must be [{num_edges}, F_edge], got {list(edge_attr.shape)}")
        if edge_weight.dim() not in (1, 2) or edge_weight.numel() != num_edges or edge_weight.size(0) != num_edges:
            raise ShapeError(f"edge_weight must hold one value per edge ({num_edges}), got {list(edge_weight.shape)}")
