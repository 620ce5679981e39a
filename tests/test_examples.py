"""Smoke tests for example scripts.

These tests ensure that the example scripts run their main execution paths
without raising exceptions.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

# Determine the repo root
ROOT = Path(__file__).resolve().parents[1]


def _run(name: str) -> subprocess.CompletedProcess:
    script = ROOT / "examples" / name
    assert script.exists(), f"Example script not found: {script}"
    result = subprocess.run(
        [sys.executable, str(script)],
        capture_output=True,
        text=True,
        check=False,
        timeout=120,
    )
    assert result.returncode == 0, (
        f"Example script failed with return code {result.returncode}.\n"
        f"STDOUT:\n{result.stdout}\n"
        f"STDERR:\n{result.stderr}"
    )
    return result


def test_rosenbrock_example_runs() -> None:
    result = _run("rosenbrock.py")
    assert "PR: x =" in result.stdout
    assert "FR: x =" in result.stdout
    assert "Configuration restored from XML: True" in result.stdout


def test_classifier_example_runs() -> None:
    result = _run("classifier_conjugate_gradient.py")
    assert "Stopping criterion" in result.stdout
    assert "Test accuracy" in result.stdout
