"""
edge_gnn package initializer.

Purpose:
    Exposes high-level modules for the edge-level GNN project.
Inputs:
    None.
Outputs:
    Makes subpackages importable as `edge_gnn.data`, `edge_gnn.models`, `edge_gnn.training`.
"""

from .errors import ConfigError, EdgeGNNError, EdgeIndexError, ShapeError

__all__ = ["ConfigError", "EdgeGNNError", "EdgeIndexError", "ShapeError"]
