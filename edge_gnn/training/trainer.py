"""
Training orchestration for edge_gnn.

Inputs:
    - model: StackedConvNet instance.
    - loss_fn: EdgeRegressionLoss.
    - loaders: PyG DataLoaders (batch_size=1, one graph per step).
Outputs:
    - Checkpoints (.ckpt) and a metrics pickle for visualization.
Purpose:
    One forward/backward/update cycle per graph per epoch, with TensorBoard logging,
    optional gradient clipping and best-checkpoint tracking.
"""

from __future__ import annotations

import os
import pickle
import time
from typing import Dict, Optional, Tuple

import torch
from torch.utils.tensorboard import SummaryWriter
from torch_geometric.loader import DataLoader


class Trainer:
    """Wraps training, evaluation, and checkpointing."""

    def __init__(
        self,
        model: torch.nn.Module,
        loss_fn,
        optimizer: torch.optim.Optimizer,
        device: torch.device,
        log_dir: str,
        grad_clip: Optional[float] = None,
    ):
        self.model = model.to(device)
        self.loss_fn = loss_fn
        self.optimizer = optimizer
        self.device = device
        self.grad_clip = grad_clip
        os.makedirs(log_dir, exist_ok=True)
        self.writer = SummaryWriter(log_dir=log_dir)

    def _forward(self, batch) -> torch.Tensor:
        return self.model(batch.edge_index, batch.x, batch.edge_attr, batch.edge_weight)

    def _step_graph(self, batch, train: bool = True) -> Tuple[float, Dict[str, float]]:
        batch = batch.to(self.device)
        with torch.set_grad_enabled(train):
            pred = self._forward(batch)
            loss, metrics = self.loss_fn(pred, batch.y)
            if train:
                loss.backward()
                if self.grad_clip is not None:
                    torch.nn.utils.clip_grad_norm_(self.model.parameters(), self.grad_clip)
                self.optimizer.step()
                self.optimizer.zero_grad()
            return loss.item(), metrics

    def _run_epoch(self, loader: DataLoader, epoch: int, split: str, train: bool) -> Dict[str, float]:
        epoch_metrics: Dict[str, float] = {}
        counted = 0
        for batch in loader:
            # No edges means no labels; MSE over an empty tensor is NaN.
            if batch.edge_index.size(1) == 0:
                continue
            _, metrics = self._step_graph(batch, train=train)
            counted += 1
            # Running mean of metrics.
            for k, v in metrics.items():
                epoch_metrics[k] = epoch_metrics.get(k, 0.0) + v
        n = max(1, counted)
        for k in epoch_metrics:
            epoch_metrics[k] /= n

        # TensorBoard logging.
        for k, v in epoch_metrics.items():
            self.writer.add_scalar(f"{split}/{k}", v, epoch)
        return epoch_metrics

    def train_epoch(self, loader: DataLoader, epoch: int) -> Dict[str, float]:
        self.model.train()
        return self._run_epoch(loader, epoch, split="train", train=True)

    def eval_epoch(self, loader: DataLoader, epoch: int, split: str = "val") -> Dict[str, float]:
        self.model.eval()
        with torch.no_grad():
            return self._run_epoch(loader, epoch, split=split, train=False)

    def fit(
        self,
        train_loader: DataLoader,
        val_loader: Optional[DataLoader],
        epochs: int,
        checkpoint_path: str,
        save_every: int = 10,
        metrics_path: str = "artifacts/metrics.pkl",
    ):
        os.makedirs(os.path.dirname(checkpoint_path) or ".", exist_ok=True)
        os.makedirs(os.path.dirname(metrics_path) or ".", exist_ok=True)

        start = time.perf_counter()
        best_loss = float("inf")
        best_epoch = 0
        history: Dict[str, Dict[str, list]] = {"train": {}, "val": {}}
        has_val = val_loader is not None and len(val_loader) > 0

        for epoch in range(epochs):
            train_metrics = self.train_epoch(train_loader, epoch)
            val_metrics = self.eval_epoch(val_loader, epoch, split="val") if has_val else {}

            for k, v in train_metrics.items():
                history["train"].setdefault(k, []).append(v)
            for k, v in val_metrics.items():
                history["val"].setdefault(k, []).append(v)

            # Checkpointing on val loss, or train loss without a val split.
            tracked = val_metrics if has_val else train_metrics
            current = tracked.get("loss/mse", float("inf"))
            if current < best_loss:
                best_loss = current
                best_epoch = epoch
                self._save_checkpoint(checkpoint_path, epoch)

            if save_every > 0 and (epoch + 1) % save_every == 0:
                self._save_checkpoint(checkpoint_path.replace(".ckpt", f"_epoch{epoch}.ckpt"), epoch)

            line = (
                f"epoch:\t{epoch};\tloss:\t{train_metrics.get('loss/mse', 0.0):.6f};"
                f"\tmetric:\t{train_metrics.get('metric/mae', 0.0):.6f}"
            )
            if has_val:
                line += f";\tval_loss:\t{val_metrics.get('loss/mse', 0.0):.6f}"
            print(line)

        elapsed = time.perf_counter() - start
        print(f"Best loss: {best_loss:.6f} (epoch {best_epoch})")
        print(f"Total CPU/GPU time: {elapsed:.3f} s.")
        self.writer.flush()

        with open(metrics_path, "wb") as f:
            pickle.dump(history, f)
        return history

    def _save_checkpoint(self, path: str, epoch: int):
        torch.save(
            {
                "model_state": self.model.state_dict(),
                "optimizer_state": self.optimizer.state_dict(),
                "epoch": epoch,
                "k": getattr(self.model, "k", None),
            },
            path,
        )

    def close(self):
        self.writer.close()

    @torch.no_grad()
    def predict(self, loader: DataLoader):
        """Run inference over a loader; returns lists of per-graph predictions and labels."""

        self.model.eval()
        preds, targets = [], []
        for batch in loader:
            batch = batch.to(self.device)
            preds.append(self._forward(batch).cpu())
            targets.append(batch.y.cpu())
        return preds, targets
