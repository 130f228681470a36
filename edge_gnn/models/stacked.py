"""
Stacked two-hop convolutions with an edge-level readout.

Inputs:
    - edge_index [2, E], node_attr [N, F_node], edge_attr [E, F_edge], edge_weight [E, 1]
Outputs:
    - per-edge scalar predictions [E, 1]
Purpose:
    conv1 once, then the same conv2 module k - 1 times (shared weights), each call fed
    the original node features as initial_node_attr; source and target embeddings of
    every edge are concatenated and reduced to one value by a DenseBlock.
"""

from typing import Sequence

import torch
import torch.nn as nn

from ..errors import ConfigError
from .conv import GraphConv, check_edge_index
from .dense import ActivationSpec, DenseBlock


class StackedConvNet(nn.Module):
    """Edge regressor built from a first convolution and a weight-shared repeated one."""

    def __init__(
        self,
        node_width: int,
        hidden_sizes_1: Sequence[int],
        hidden_sizes_2: Sequence[int],
        hidden_sizes_mlp: Sequence[int],
        output_node_width: int,
        edge_width: int,
        dropout_prob: float = 0.0,
        use_normalization: bool = True,
        k: int = 6,
        activation: ActivationSpec = "tanh",
        end_activation: ActivationSpec = "identity",
    ):
        super().__init__()
        if k < 1:
            raise ConfigError(f"StackedConvNet: k cannot be less than one, got {k}.")
        self.k = k
        self.conv1 = GraphConv(
            node_width,
            hidden_sizes_1,
            output_node_width,
            node_width,
            edge_width,
            dropout_prob=dropout_prob,
            use_normalization=use_normalization,
            activation=activation,
            end_activation=end_activation,
        )
        self.conv2 = GraphConv(
            output_node_width,
            hidden_sizes_2,
            output_node_width,
            node_width,
            edge_width,
            dropout_prob=dropout_prob,
            use_normalization=use_normalization,
            activation=activation,
            end_activation=end_activation,
        )
        self.reducer = DenseBlock(
            2 * output_node_width,
            hidden_sizes_mlp,
            1,
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
    ) -> torch.Tensor:
        embedding = self.conv1(edge_index, node_attr, edge_attr, edge_weight, node_attr)
        for _ in range(self.k - 1):
            embedding = self.conv2(edge_index, embedding, edge_attr, edge_weight, node_attr)

        check_edge_index(edge_index, embedding.size(0))
        src_embed = embedding.index_select(0, edge_index[0])
        tgt_embed = embedding.index_select(0, edge_index[1])
        return self.reducer(torch.cat([src_embed, tgt_embed], dim=-1))


def build_model(node_width: int, edge_width: int, model_cfg) -> StackedConvNet:
    """Factory helper that reads hyperparameters from ModelConfig."""

    return StackedConvNet(
        node_width=node_width,
        hidden_sizes_1=list(model_cfg.hidden_sizes_1),
        hidden_sizes_2=list(model_cfg.hidden_sizes_2),
        hidden_sizes_mlp=list(model_cfg.hidden_sizes_mlp),
        output_node_width=model_cfg.output_node_width,
        edge_width=edge_width,
        dropout_prob=model_cfg.dropout,
        use_normalization=model_cfg.layer_norm,
        k=model_cfg.k,
        activation=model_cfg.activation,
        end_activation=model_cfg.end_activation,
    )
