"""
Model package for edge_gnn.

Purpose:
    Provides the dense block, the two-hop graph convolution and the stacked edge regressor.
Exports:
    - DenseBlock: configurable MLP used by every layer.
    - GraphConv: bidirectional 1-hop + 2-hop message passing.
    - StackedConvNet: conv1 + weight-shared conv2 (k - 1 times) + edge reducer.
    - build_model: convenience constructor using ModelConfig.
"""

from .conv import GraphConv, ScatterSumAggregate, TwoHopMessage, check_edge_index
from .dense import ACTIVATIONS, DenseBlock
from .stacked import StackedConvNet, build_model

__all__ = [
    "ACTIVATIONS",
    "DenseBlock",
    "GraphConv",
    "ScatterSumAggregate",
    "TwoHopMessage",
    "StackedConvNet",
    "build_model",
    "check_edge_index",
]
