"""
Training entrypoint for the edge-level GNN.

Inputs:
    - Synthetic graphs generated from DataConfig (seeded).
    - configs/training_parameters.json (num_epochs, lr) if present; CLI flags override.
Outputs:
    - Model checkpoints, metric history, and a config snapshot under artifacts/ and logs/.
Usage:
    python train.py --params configs/training_parameters.json
"""

import argparse
import json
import os
import random

import numpy as np
import torch
from torch_geometric.loader import DataLoader

from config import configs_to_dict, get_default_configs, load_training_parameters
from edge_gnn.data import SyntheticGraphGenerator, build_splits
from edge_gnn.models import build_model
from edge_gnn.training import EdgeRegressionLoss, Trainer


def set_seed(seed: int):
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)


def parse_args():
    parser = argparse.ArgumentParser(description="Train the stacked two-hop edge GNN.")
    parser.add_argument("--params", type=str, default=None, help="JSON file with num_epochs and lr.")
    parser.add_argument("--epochs", type=int, default=None, help="Override num_epochs.")
    parser.add_argument("--lr", type=float, default=None, help="Override learning rate.")
    parser.add_argument("--k", type=int, default=None, help="Override number of convolution applications.")
    parser.add_argument("--num-graphs", type=int, default=None, help="Number of synthetic graphs.")
    parser.add_argument("--device", type=str, default=None, help="cuda or cpu override.")
    args, _ = parser.parse_known_args()
    return args


def main():
    args = parse_args()
    paths, data_cfg, model_cfg, train_cfg = get_default_configs()
    params_path = args.params or paths.training_parameters
    if args.params or os.path.exists(params_path):
        load_training_parameters(params_path, train_cfg)
        print(f"Loaded training parameters from {params_path}")
    if args.epochs is not None:
        train_cfg.num_epochs = args.epochs
    if args.lr is not None:
        train_cfg.lr = args.lr
    if args.k is not None:
        model_cfg.k = args.k
    if args.num_graphs is not None:
        data_cfg.num_graphs = args.num_graphs
    if args.device:
        train_cfg.device = args.device

    # Device selection with CPU compatibility.
    if train_cfg.device.lower() == "cpu":
        device = torch.device("cpu")
    else:
        device = torch.device("cuda" if torch.cuda.is_available() else "cpu")

    print("\n" + "=" * 80)
    print("Starting edge GNN training")
    print("=" * 80)
    print(f"Device: {device}")
    set_seed(train_cfg.seed)
    print(f"Seed: {train_cfg.seed}")

    os.makedirs(paths.artifact_dir, exist_ok=True)
    os.makedirs(paths.log_dir, exist_ok=True)

    print("\nStage 1: Generating graphs")
    print("-" * 80)
    generator = torch.Generator().manual_seed(train_cfg.seed)
    graph_source = SyntheticGraphGenerator(
        generator,
        mean_nodes=data_cfg.mean_nodes,
        std_nodes=data_cfg.std_nodes,
        node_width=data_cfg.node_width,
        edge_threshold=data_cfg.edge_threshold,
    )
    graphs = graph_source.make_dataset(data_cfg.num_graphs)
    train_graphs, val_graphs = build_splits(graphs, val=data_cfg.val_split, seed=train_cfg.seed)
    print(f"Graphs: {len(graphs)} (train {len(train_graphs)}, val {len(val_graphs)})")

    print("\nStage 2: Building model")
    print("-" * 80)
    model = build_model(node_width=graph_source.node_width, edge_width=graph_source.edge_width, model_cfg=model_cfg)
    total_params = sum(p.numel() for p in model.parameters())
    print(f"  k: {model_cfg.k}, output node width: {model_cfg.output_node_width}, activation: {model_cfg.activation}")
    print(f"Model built: {total_params:,} parameters")

    optimizer = torch.optim.Adam(model.parameters(), lr=train_cfg.lr)
    print(f"Optimizer: Adam(lr={train_cfg.lr})")

    train_loader = DataLoader(train_graphs, batch_size=1, shuffle=False)
    val_loader = DataLoader(val_graphs, batch_size=1, shuffle=False) if val_graphs else None

    trainer = Trainer(
        model=model,
        loss_fn=EdgeRegressionLoss(),
        optimizer=optimizer,
        device=device,
        log_dir=paths.log_dir,
        grad_clip=train_cfg.grad_clip if train_cfg.grad_clip > 0 else None,
    )

    print("\nStage 3: Training")
    print("=" * 80)
    trainer.fit(
        train_loader=train_loader,
        val_loader=val_loader,
        epochs=train_cfg.num_epochs,
        checkpoint_path=paths.checkpoint_path,
        save_every=train_cfg.save_every,
        metrics_path=paths.metrics_path,
    )
    trainer.close()

    # Save configs for reproducibility.
    with open(os.path.join(paths.artifact_dir, "config_snapshot.json"), "w") as f:
        json.dump(configs_to_dict(paths, data_cfg, model_cfg, train_cfg), f, indent=2)

    print(f"Training complete. Best checkpoint at {paths.checkpoint_path}")
    print(f"Metrics saved to {paths.metrics_path}")


if __name__ == "__main__":
    main()
