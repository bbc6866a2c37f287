"""Unit tests for training-properties parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import KernelIOConfigError
from core.training_spec import load_training_spec
from tests.fixture_paths import fixture_path


def test_load_training_spec_parses_all_sections() -> None:
    """Valid spec should split kernel, training, and execution settings."""
    spec = load_training_spec(fixture_path("training_spec/valid_rbf.yaml"))

    assert spec.kernel.kernel_type == "rbf"
    assert spec.kernel.hyperparameters == (0.5,)
    assert (spec.training.noise_param, spec.training.convergence_eta) == (2.0, 0.001)
    assert spec.execution.thread_count == 4


def test_load_training_spec_applies_defaults(tmp_path: Path) -> None:
    """Omitted sections should take default values."""
    spec_path = tmp_path / "linear.yaml"
    spec_path.write_text("version: 1\nkernel:\n  type: linear\n", encoding="utf-8")

    spec = load_training_spec(spec_path)

    assert spec.kernel.hyperparameters == ()
    assert spec.execution.thread_count == 1


def test_load_training_spec_rejects_unknown_kernel() -> None:
    """Unsupported kernel names should raise config error."""
    with pytest.raises(KernelIOConfigError):
        load_training_spec(fixture_path("training_spec/unknown_kernel.yaml"))


def test_load_training_spec_rejects_unknown_execution_key() -> None:
    """Unknown execution fields should be rejected."""
    with pytest.raises(KernelIOConfigError):
        load_training_spec(fixture_path("training_spec/invalid_execution_key.yaml"))


def test_load_training_spec_rejects_missing_file(tmp_path: Path) -> None:
    """Missing spec files should raise config error."""
    with pytest.raises(KernelIOConfigError):
        load_training_spec(tmp_path / "missing.yaml")


def test_load_training_spec_rejects_non_numeric_hyperparameter(tmp_path: Path) -> None:
    """Hyperparameters must be numbers."""
    spec_path = tmp_path / "bad.yaml"
    spec_path.write_text(
        "version: 1\nkernel:\n  type: rbf\n  hyperparameters: [wide]\n", encoding="utf-8"
    )

    with pytest.raises(KernelIOConfigError):
        load_training_spec(spec_path)
