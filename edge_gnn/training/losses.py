"""
Edge regression loss.

Inputs:
    - pred: per-edge predictions [E, 1] from StackedConvNet.
    - target: edge labels [E, 1].
Outputs:
    - loss scalar (mean squared error) and a metrics dict with the loss and the
      mean absolute error used for monitoring.
"""

from __future__ import annotations

from typing import Dict, Tuple

import torch
import torch.nn as nn
import torch.nn.functional as F

from ..errors import ShapeError


class EdgeRegressionLoss(nn.Module):
    """MSE optimized, MAE reported."""

    def forward(self, pred: torch.Tensor, target: torch.Tensor) -> Tuple[torch.Tensor, Dict[str, float]]:
        if target.dim() == 1:
            target = target.unsqueeze(-1)
        if pred.shape != target.shape:
            raise ShapeError(f"Prediction shape {list(pred.shape)} does not match label shape {list(target.shape)}")
        loss = F.mse_loss(pred, target)
        metric = F.l1_loss(pred, target)
        metrics = {
            "loss/mse": loss.item(),
            "metric/mae": metric.item(),
        }
        return loss, metrics
