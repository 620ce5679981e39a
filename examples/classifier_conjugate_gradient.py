"""Train a small PyTorch classifier with conjugate gradient.

The whole training set is used every iteration (full-batch training), a
held-out split drives early stopping and the final summary table is printed.
"""

from __future__ import annotations

from typing import Tuple

import torch
from torch import nn

from cgtrain.optimize import (
    ConjugateGradient,
    ConjugateGradientConfig,
    HistoryReservation,
    StoppingCriteria,
    format_final_results,
)
from cgtrain.torch import ModulePerformanceFunctional


def make_xor_dataset(n_samples: int = 200) -> Tuple[torch.Tensor, torch.Tensor]:
    """Generate a synthetic XOR-style 2D dataset.

    Args:
        n_samples: Number of samples to generate.

    Returns:
        Tuple of (features, labels) with features in [-1, 1]^2 and labels
        in {0, 1}.
    """
    x = 2 * torch.rand(n_samples, 2, dtype=torch.float64) - 1
    y = ((x[:, 0] * x[:, 1]) > 0).long()
    return x, y


def main() -> None:
    """Train and evaluate the classifier."""
    torch.manual_seed(0)

    x, y = make_xor_dataset(200)
    train_x, train_y = x[:160], y[:160]
    test_x, test_y = x[160:], y[160:]

    model = nn.Sequential(nn.Linear(2, 16), nn.Tanh(), nn.Linear(16, 2)).double()
    criterion = nn.CrossEntropyLoss()

    functional = ModulePerformanceFunctional(
        model,
        lambda m: criterion(m(train_x), train_y),
        selection_loss_fn=lambda m: criterion(m(test_x), test_y),
    )
    config = ConjugateGradientConfig(
        training_direction_method="PR",
        stopping=StoppingCriteria(
            gradient_norm_goal=1e-4,
            maximum_selection_performance_decreases=10,
            maximum_iterations_number=150,
        ),
        reservation=HistoryReservation(selection_performance=True),
        display=False,
    )

    print("Training classifier with conjugate gradient...")
    optimizer = ConjugateGradient(functional, config=config)
    results = optimizer.perform_training()
    print(format_final_results(results, config))

    with torch.no_grad():
        predictions = model(test_x).argmax(dim=1)
        accuracy = (predictions == test_y).double().mean().item()
    print(f"Test accuracy: {accuracy:.3f}")


if __name__ == "__main__":
    main()
