"""
Visualization helpers for edge_gnn.

Inputs:
    - artifacts/metrics.pkl (loss curves)
    - outputs/inference.npz (pred/target/edge_index from inference.py)
Outputs:
    - PNG plots and a model summary saved under outputs/
Usage:
    python tools/visualize.py --metrics artifacts/metrics.pkl --pred outputs/inference.npz
"""
import argparse
import os
import pickle
import sys

# Ensure the project root directory is in sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from config import get_default_configs
from edge_gnn.models import build_model


def plot_losses(metrics_path: str, out_dir: str):
    with open(metrics_path, "rb") as f:
        history = pickle.load(f)
    train = history.get("train", {})
    val = history.get("val", {})

    os.makedirs(out_dir, exist_ok=True)
    for key in train.keys():
        plt.figure(figsize=(6, 4))
        plt.plot(train[key], label="train")
        if key in val:
            plt.plot(val[key], label="val")
        plt.xlabel("Epoch")
        plt.ylabel(key)
        plt.legend()
        plt.title(key.replace("/", " "))
        out_path = os.path.join(out_dir, f"{key.replace('/', '_')}.png")
        plt.tight_layout()
        plt.savefig(out_path, dpi=300)
        plt.close()
        print(f"Saved {key} curve to {out_path}")


def plot_edge_scatter(pred: np.ndarray, target: np.ndarray, out_dir: str):
    """Predicted vs. true edge values."""

    os.makedirs(out_dir, exist_ok=True)
    pred, target = pred.flatten(), target.flatten()
    lo = float(min(pred.min(), target.min()))
    hi = float(max(pred.max(), target.max()))
    plt.figure(figsize=(5, 5))
    plt.scatter(target, pred, s=4, alpha=0.6)
    plt.plot([lo, hi], [lo, hi], "k--", linewidth=1)
    plt.xlabel("label")
    plt.ylabel("prediction")
    plt.title("Edge predictions")
    out_path = os.path.join(out_dir, "edge_scatter.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=300)
    plt.close()
    print(f"Saved edge scatter to {out_path}")


def plot_histograms(pred: np.ndarray, target: np.ndarray, out_dir: str):
    os.makedirs(out_dir, exist_ok=True)
    plt.figure(figsize=(6, 4))
    sns.kdeplot(target.flatten(), label="gt", fill=True)
    sns.kdeplot(pred.flatten(), label="pred", fill=True)
    plt.title("Distribution: edge values")
    plt.legend()
    out_path = os.path.join(out_dir, "edge_hist.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=300)
    plt.close()
    print(f"Saved edge histogram to {out_path}")


def export_model_summary(out_path: str):
    _, data_cfg, model_cfg, _ = get_default_configs()
    model = build_model(node_width=data_cfg.node_width, edge_width=data_cfg.node_width, model_cfg=model_cfg)
    total_params = sum(p.numel() for p in model.parameters())

    text = "Model Architecture Summary\n"
    text += "=" * 50 + "\n"
    text += f"\n{str(model)}\n\n"
    text += "=" * 50 + "\n"
    text += f"Total Parameters: {total_params:,}\n"
    text += f"Convolution applications (k): {model_cfg.k}\n"
    text += f"Node width: {data_cfg.node_width}, output node width: {model_cfg.output_node_width}\n"

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w") as f:
        f.write(text)
    print(f"Saved model summary to {out_path}")


def main():
    parser = argparse.ArgumentParser(description="Plot training curves and edge predictions.")
    parser.add_argument("--metrics", type=str, default="artifacts/metrics.pkl", help="Path to metrics.pkl from training.")
    parser.add_argument("--pred", type=str, default="outputs/inference.npz", help="Path to npz saved by inference.py.")
    parser.add_argument("--out", type=str, default="outputs", help="Directory to store plots.")
    args = parser.parse_args()

    if os.path.exists(args.metrics):
        plot_losses(args.metrics, out_dir=args.out)
    else:
        print(f"Metrics file {args.metrics} not found; skipping loss plot.")

    if os.path.exists(args.pred):
        payload = np.load(args.pred)
        plot_edge_scatter(payload["pred"], payload["target"], args.out)
        plot_histograms(payload["pred"], payload["target"], args.out)
    else:
        print(f"Prediction file {args.pred} not found; run inference.py first.")

    export_model_summary(os.path.join(args.out, "model_summary.txt"))


if __name__ == "__main__":
    main()
