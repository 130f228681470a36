"""
Training utilities for edge_gnn.

Purpose:
    Implements the edge regression loss, training orchestration, evaluation, and checkpoints.
Exports:
    - EdgeRegressionLoss: MSE loss with an MAE monitoring metric.
    - Trainer: per-graph training loop with logging and checkpointing.
"""

from .losses import EdgeRegressionLoss
from .trainer import Trainer

__all__ = ["EdgeRegressionLoss", "Trainer"]
