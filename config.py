"""
Project-wide configuration for edge_gnn.

Inputs:
    None at import time; values are static defaults that can be overridden by CLI args
    or by a JSON training-parameter file (num_epochs, lr).
Outputs:
    Dataclass instances describing paths, synthetic data, model hyperparameters, and training knobs.
Usage:
    from config import get_default_configs
    paths, data_cfg, model_cfg, train_cfg = get_default_configs()
"""

import json
import os
from dataclasses import asdict, dataclass
from typing import List, Tuple

from edge_gnn.errors import ConfigError


@dataclass
class PathConfig:
    """Filesystem locations for artifacts and logs."""

    # JSON file holding num_epochs and lr; optional.
    training_parameters: str = "configs/training_parameters.json"
    artifact_dir: str = "artifacts"
    checkpoint_path: str = "artifacts/edge_gnn.ckpt"
    metrics_path: str = "artifacts/metrics.pkl"
    # Logging and plots.
    log_dir: str = "logs"
    plot_dir: str = "outputs"


@dataclass
class DataConfig:
    """Synthetic graph generation settings."""

    num_graphs: int = 100
    # Graph sizes ~ Normal(mean_nodes, std_nodes), rounded.
    mean_nodes: float = 30.0
    std_nodes: float = 3.0
    node_width: int = 3  # edge features are endpoint differences, so edge width == node width
    edge_threshold: float = 0.7
    val_split: float = 0.0


@dataclass
class ModelConfig:
    """Architecture hyperparameters."""

    hidden_sizes_1: List[int] = (64, 64)  # type: ignore
    hidden_sizes_2: List[int] = (64, 64)  # type: ignore
    hidden_sizes_mlp: List[int] = (80, 80)  # type: ignore
    output_node_width: int = 32
    dropout: float = 0.0
    layer_norm: bool = True
    k: int = 6  # conv1 once + shared conv2 k - 1 times
    activation: str = "relu"
    end_activation: str = "identity"


@dataclass
class TrainConfig:
    """Training loop parameters."""

    device: str = "cpu"
    num_epochs: int = 10
    lr: float = 1e-3
    grad_clip: float = 0.0  # 0 disables clipping
    save_every: int = 0  # 0 disables periodic checkpoints
    seed: int = 42


def get_default_configs() -> Tuple[PathConfig, DataConfig, ModelConfig, TrainConfig]:
    """Return default configs as a tuple."""

    return PathConfig(), DataConfig(), ModelConfig(), TrainConfig()


def configs_to_dict(paths: PathConfig, data: DataConfig, model: ModelConfig, train: TrainConfig):
    """Serialize configs to a plain dict for logging or JSON export."""

    return {
        "paths": asdict(paths),
        "data": asdict(data),
        "model": asdict(model),
        "train": asdict(train),
    }


def load_training_parameters(path: str, train_cfg: TrainConfig) -> TrainConfig:
    """Override num_epochs and lr on train_cfg from a JSON file."""

    if not os.path.exists(path):
        raise ConfigError(f"Training parameter file not found: {path}")
    with open(path, "r") as f:
        try:
            params = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(params, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    for key in ("num_epochs", "lr"):
        if key not in params:
            raise ConfigError(f"{path} is missing required key '{key}'")

    num_epochs = params["num_epochs"]
    if isinstance(num_epochs, bool) or not isinstance(num_epochs, int) or num_epochs < 1:
        raise ConfigError(f"num_epochs must be a positive integer, got {num_epochs!r}")
    lr = params["lr"]
    if isinstance(lr, bool) or not isinstance(lr, (int, float)) or lr <= 0:
        raise ConfigError(f"lr must be a positive number, got {lr!r}")

    train_cfg.num_epochs = num_epochs
    train_cfg.lr = float(lr)
    return train_cfg
