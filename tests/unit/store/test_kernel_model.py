"""Unit tests for the kernel model unit."""

from __future__ import annotations

import io

import pytest

from core.config import KernelIOConfig
from core.types import Feature, KernelConfig
from ingest.dataset_reader import read_labeled_dataset
from store.kernel_model import Model

_RBF = KernelConfig(kernel_type="rbf", hyperparameters=(0.5,))


def test_from_support_vectors_derives_counts_and_cache() -> None:
    """Builder should compute n_elem, maxdim, and norms from features."""
    model = Model.from_support_vectors(
        kernel=_RBF,
        bias=-0.25,
        support_vectors=[[Feature(1, 5.0), Feature(3, 2.0)], [Feature(2, 4.0)]],
        weights=[0.75, -0.5],
    )

    assert (model.n_elem, model.maxdim, len(model)) == (3, 3, 2)
    assert model.l2norm_cache.tolist() == [29.0, 16.0]
    assert model.kernel_type_code == 1


def test_model_rejects_weight_count_mismatch() -> None:
    """Every support vector needs exactly one weight."""
    with pytest.raises(ValueError):
        Model.from_support_vectors(_RBF, 0.0, [[Feature(1, 1.0)]], weights=[1.0, 2.0])


def test_model_rejects_maxdim_below_observed_index() -> None:
    """maxdim may exceed but never undercut the stored indices."""
    with pytest.raises(ValueError):
        Model.from_support_vectors(_RBF, 0.0, [[Feature(9, 1.0)]], weights=[1.0], maxdim=4)


def test_model_rejects_unknown_kernel_type() -> None:
    """Only linear and rbf kernels are supported."""
    kernel = KernelConfig(kernel_type="sigmoid")  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        Model.from_support_vectors(kernel, 0.0, [], weights=[])


def test_from_dataset_copies_selected_samples() -> None:
    """Model arena should hold copies of the chosen samples."""
    dataset = read_labeled_dataset(io.StringIO("+1 1:5 3:2\n-1 2:4\n+1 7:1\n"), KernelIOConfig())

    model = Model.from_dataset(dataset, [2, 0], [0.3, 0.7], _RBF, bias=0.1)

    assert model.features(0) == (Feature(7, 1.0),)
    assert model.features(1) == (Feature(1, 5.0), Feature(3, 2.0))
    assert model.maxdim == dataset.maxdim
    assert model.arena is not dataset.arena


def test_kernel_property_rebuilds_config() -> None:
    """Kernel config should round-trip through the model."""
    model = Model.from_support_vectors(_RBF, 0.0, [], weights=[])

    assert model.kernel == _RBF


def test_n_elem_counts_explicit_zero_entries() -> None:
    """Stored zero-valued features still count as entries."""
    model = Model.from_support_vectors(
        kernel=_RBF,
        bias=0.0,
        support_vectors=[[Feature(1, 1.0), Feature(2, 0.0)]],
        weights=[1.0],
    )

    assert model.n_elem == 2
    assert model.features(0) == (Feature(1, 1.0), Feature(2, 0.0))
