"""
Fully connected block shared by the convolutions and the edge reducer.

Inputs:
    - x: tensor [*, input_size]
Outputs:
    - tensor [*, output_size]
Purpose:
    Linear -> [LayerNorm] -> activation -> [Dropout] per hidden layer, then a final
    Linear and an optional end activation.
"""

from typing import Callable, Dict, Sequence, Union

import torch
import torch.nn as nn

from ..errors import ConfigError

ActivationSpec = Union[str, Callable[[], nn.Module]]

ACTIVATIONS: Dict[str, Callable[[], nn.Module]] = {
    "tanh": nn.Tanh,
    "relu": nn.ReLU,
    "gelu": nn.GELU,
    "elu": nn.ELU,
    "leaky_relu": nn.LeakyReLU,
    "sigmoid": nn.Sigmoid,
    "identity": nn.Identity,
}


def resolve_activation(spec: ActivationSpec) -> Callable[[], nn.Module]:
    """Map an activation name (or module factory) to a zero-argument factory."""

    if isinstance(spec, str):
        key = spec.lower()
        if key not in ACTIVATIONS:
            raise ConfigError(f"Unknown activation '{spec}'. Options: {sorted(ACTIVATIONS)}")
        return ACTIVATIONS[key]
    if callable(spec):
        return spec
    raise ConfigError(f"Activation must be a name or a module factory, got {type(spec).__name__}")


def check_hidden_sizes(owner: str, hidden_sizes: Sequence[int]) -> None:
    if len(hidden_sizes) == 0:
        raise ConfigError(f"{owner}: hidden_sizes cannot be empty.")
    for size in hidden_sizes:
        if size < 1:
            raise ConfigError(f"{owner}: all components of hidden_sizes must be greater than zero, got {list(hidden_sizes)}.")


class DenseBlock(nn.Module):
    """Configurable MLP; parameters are owned here and nowhere else."""

    def __init__(
        self,
        input_size: int,
        hidden_sizes: Sequence[int],
        output_size: int,
        dropout_prob: float = 0.0,
        use_normalization: bool = True,
        activation: ActivationSpec = "tanh",
        end_activation: ActivationSpec = "identity",
    ):
        super().__init__()
        if input_size < 1:
            raise ConfigError(f"DenseBlock: input_size cannot be less than one, got {input_size}.")
        if output_size < 1:
            raise ConfigError(f"DenseBlock: output_size cannot be less than one, got {output_size}.")
        check_hidden_sizes("DenseBlock", hidden_sizes)
        if not 0.0 <= dropout_prob <= 1.0:
            raise ConfigError(f"DenseBlock: dropout_prob must lie in [0, 1], got {dropout_prob}.")

        act = resolve_activation(activation)
        end_act = resolve_activation(end_activation)

        self.input_size = input_size
        self.output_size = output_size
        self.hidden_sizes = list(hidden_sizes)

        layers = []
        in_dim = input_size
        for hidden in self.hidden_sizes:
            layers.append(nn.Linear(in_dim, hidden))
            if use_normalization:
                layers.append(nn.LayerNorm(hidden))
            layers.append(act())
            if dropout_prob > 0.0:
                layers.append(nn.Dropout(dropout_prob))
            in_dim = hidden
        layers.append(nn.Linear(in_dim, output_size))
        if end_act is not nn.Identity:
            layers.append(end_act())
        self.model = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.model(x)
