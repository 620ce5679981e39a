"""Minimize the Rosenbrock function with both direction methods.

Also writes the configuration used to an XML file and reads it back.
"""

from __future__ import annotations

import os
import tempfile

import numpy as np

from cgtrain.io import dump_config_xml, load_config_xml
from cgtrain.optimize import ConjugateGradient, Problem


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def main() -> None:
    for method in ("PR", "FR"):
        problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, parameters=np.array([-1.2, 1.0]))
        optimizer = ConjugateGradient(problem)
        optimizer.set_training_direction_method(method)
        optimizer.config.display = False
        optimizer.config.stopping.gradient_norm_goal = 1e-6
        results = optimizer.perform_training()
        print(
            f"{method}: x = {np.round(results.final_parameters, 4)}, "
            f"f = {results.final_performance:.3e}, "
            f"iterations = {results.iterations_number} ({results.message})"
        )

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "conjugate_gradient.xml")
        dump_config_xml(optimizer.config, path)
        restored = load_config_xml(path)
    print(f"Configuration restored from XML: {restored == optimizer.config}")


if __name__ == "__main__":
    main()
