"""
Data package for edge_gnn.

Purpose:
    Graph construction/validation and seeded synthetic graph generation.
Imports:
    - graph: Data construction and input-contract checks.
    - synthetic: random graphs and train/val splits.
"""

from .graph import make_graph, validate_graph
from .synthetic import SyntheticGraphGenerator, build_splits

__all__ = [
    "make_graph",
    "validate_graph",
    "SyntheticGraphGenerator",
    "build_splits",
]
