"""
Exception types raised by edge_gnn.

ConfigError is raised at construction time, ShapeError and EdgeIndexError while
tensors are combined inside a forward pass. None of them are handled internally.
"""


class EdgeGNNError(Exception):
    """Base class for all edge_gnn errors."""


class ConfigError(EdgeGNNError, ValueError):
    """Invalid structural configuration (sizes, hop count, config file values)."""


class ShapeError(EdgeGNNError, RuntimeError):
    """Tensors combined during forward have incompatible dimensions."""


class EdgeIndexError(EdgeGNNError, IndexError):
    """An edge_index entry is malformed or points outside [0, num_nodes)."""
