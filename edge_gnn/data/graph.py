"""
Graph container helpers.

Inputs:
    - node features, edge_index, edge features, edge weights and (optionally) edge labels.
Outputs:
    - torch_geometric.data.Data objects with x, edge_index, edge_attr, edge_weight, y.
Purpose:
    One Data object per training example; validate_graph checks the invariants the
    model relies on before any tensor is combined.
"""

from typing import Optional

import torch
from torch_geometric.data import Data

from ..errors import ShapeError
from ..models.conv import check_edge_index


def make_graph(
    node_attr: torch.Tensor,
    edge_index: torch.Tensor,
    edge_attr: torch.Tensor,
    edge_weight: Optional[torch.Tensor] = None,
    y: Optional[torch.Tensor] = None,
) -> Data:
    """Bundle tensors into a Data object; edge weights default to ones [E, 1]."""

    if edge_weight is None:
        edge_weight = torch.ones((edge_index.size(1), 1), dtype=node_attr.dtype)
    elif edge_weight.dim() == 1:
        edge_weight = edge_weight.unsqueeze(-1)
    data = Data(
        x=node_attr,
        edge_index=edge_index.long(),
        edge_attr=edge_attr,
        edge_weight=edge_weight,
        num_nodes=node_attr.size(0),
    )
    if y is not None:
        data.y = y if y.dim() == 2 else y.unsqueeze(-1)
    validate_graph(data)
    return data


def validate_graph(data: Data, node_width: Optional[int] = None, edge_width: Optional[int] = None) -> Data:
    """Raise ShapeError / EdgeIndexError if the graph breaks the model's input contract."""

    x, edge_index = data.x, data.edge_index
    if x is None or x.dim() != 2:
        raise ShapeError(f"x must be a [N, F_node] tensor, got {None if x is None else list(x.shape)}")
    check_edge_index(edge_index, x.size(0))
    num_edges = edge_index.size(1)

    edge_attr = data.edge_attr
    if edge_attr is None or edge_attr.dim() != 2 or edge_attr.size(0) != num_edges:
        raise ShapeError(f"edge_attr must be [{num_edges}, F_edge], got {None if edge_attr is None else list(edge_attr.shape)}")
    edge_weight = data.edge_weight
    if edge_weight is None or edge_weight.numel() != num_edges:
        raise ShapeError(f"edge_weight must hold {num_edges} values")
    y = getattr(data, "y", None)
    if y is not None and y.size(0) != num_edges:
        raise ShapeError(f"y must hold one label per edge ({num_edges}), got {list(y.shape)}")

    if node_width is not None and x.size(1) != node_width:
        raise ShapeError(f"Expected node width {node_width}, got {x.size(1)}")
    if edge_width is not None and edge_attr.size(1) != edge_width:
        raise ShapeError(f"Expected edge width {edge_width}, got {edge_attr.size(1)}")
    return data
