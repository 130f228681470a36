"""
Inference script for the trained edge GNN.

Inputs:
    - checkpoint (.ckpt) saved by train.py
    - a seeded synthetic graph built from DataConfig
Outputs:
    - .npz with per-edge predictions, labels, and edge_index (plotted by tools/visualize.py)
Usage:
    python inference.py --checkpoint artifacts/edge_gnn.ckpt --seed 7
"""

import argparse
import os

import numpy as np
import torch

from config import get_default_configs
from edge_gnn.data import SyntheticGraphGenerator
from edge_gnn.models import build_model


def load_model(checkpoint_path: str, node_width: int, edge_width: int, model_cfg, device: torch.device, k=None):
    """Rebuild the model with the k it was trained with (unless overridden) and load its weights."""

    checkpoint = torch.load(checkpoint_path, map_location=device)
    # conv2 weights do not depend on k, so the loaded state alone cannot recover it.
    if k is not None:
        model_cfg.k = k
    elif checkpoint.get("k") is not None:
        model_cfg.k = checkpoint["k"]
    model = build_model(node_width=node_width, edge_width=edge_width, model_cfg=model_cfg)
    model.load_state_dict(checkpoint["model_state"])
    return model.to(device).eval()


def parse_args():
    parser = argparse.ArgumentParser(description="Predict edge values on a synthetic graph.")
    parser.add_argument("--checkpoint", type=str, default="artifacts/edge_gnn.ckpt", help="Path to checkpoint.")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the synthetic graph.")
    parser.add_argument("--k", type=int, default=None, help="Override the number of convolution applications stored in the checkpoint.")
    parser.add_argument("--out", type=str, default="outputs/inference.npz", help="Output .npz for predictions.")
    parser.add_argument("--device", type=str, default=None, help="Force device: cpu or cuda.")
    args, _ = parser.parse_known_args()
    return args


def main():
    args = parse_args()
    _, data_cfg, model_cfg, train_cfg = get_default_configs()
    if args.device:
        train_cfg.device = args.device

    # Device selection with CPU fallback.
    if train_cfg.device.lower() == "cpu":
        device = torch.device("cpu")
    else:
        device = torch.device("cuda" if torch.cuda.is_available() else "cpu")

    graph_source = SyntheticGraphGenerator(
        torch.Generator().manual_seed(args.seed),
        mean_nodes=data_cfg.mean_nodes,
        std_nodes=data_cfg.std_nodes,
        node_width=data_cfg.node_width,
        edge_threshold=data_cfg.edge_threshold,
    )
    graph = graph_source.sample()

    model = load_model(
        args.checkpoint,
        node_width=graph_source.node_width,
        edge_width=graph_source.edge_width,
        model_cfg=model_cfg,
        device=device,
        k=args.k,
    )

    with torch.no_grad():
        graph = graph.to(device)
        pred = model(graph.edge_index, graph.x, graph.edge_attr, graph.edge_weight)

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    np.savez_compressed(
        args.out,
        pred=pred.cpu().numpy(),
        target=graph.y.cpu().numpy(),
        edge_index=graph.edge_index.cpu().numpy(),
    )
    mae = float(np.abs(pred.cpu().numpy() - graph.y.cpu().numpy()).mean())
    print(f"Inference complete on {graph.num_nodes} nodes / {graph.edge_index.size(1)} edges (MAE {mae:.6f}).")
    print(f"Saved predictions to {args.out}")


if __name__ == "__main__":
    main()
