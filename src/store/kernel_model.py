"""Trained kernel model.

A model keeps the kernel configuration, the bias, and the weighted
support vectors. Support vectors live in the model's own arena, never
in the arena of the dataset they were selected from.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from core.constants import KERNEL_TYPE_CODES
from core.types import Feature, KernelConfig, KernelType
from ingest.feature_arena import FeatureArena, SparseVector
from store.lifecycle import ArenaOwner
from store.sparse_dataset import Dataset


class Model(ArenaOwner):
    """Kernel classifier state needed to score future data."""

    _kind = "model"

    def __init__(
        self,
        kernel: KernelConfig,
        bias: float,
        weights: Sequence[float] | np.ndarray,
        arena: FeatureArena,
        maxdim: int | None = None,
    ) -> None:
        """Wrap a frozen support-vector arena as a model.

        Args:
            kernel: Kernel type and hyperparameters.
            bias: Bias term of the decision function.
            weights: One weight per support vector.
            arena: Frozen arena with one span per support vector.
            maxdim: Training dimensionality; defaults to the largest index
                stored in the arena and may not be smaller than it.

        Raises:
            ValueError: If kernel, weights, or maxdim are inconsistent.
        """
        super().__init__()
        if kernel.kernel_type not in KERNEL_TYPE_CODES:
            raise ValueError(f"Unsupported kernel type '{kernel.kernel_type}'.")
        weight_array = np.array(weights, dtype=np.float64)
        if weight_array.shape != (arena.span_count,):
            raise ValueError(
                f"Expected {arena.span_count} weights, got {weight_array.shape[0]}."
            )
        resolved_maxdim = arena.maxdim if maxdim is None else int(maxdim)
        if resolved_maxdim < arena.maxdim:
            raise ValueError(
                f"maxdim {resolved_maxdim} is below largest support-vector index {arena.maxdim}."
            )
        hyperparameters = np.array(kernel.hyperparameters, dtype=np.float64)
        weight_array.setflags(write=False)
        hyperparameters.setflags(write=False)
        self._kernel_type: KernelType = kernel.kernel_type
        self._hyperparameters: np.ndarray | None = hyperparameters
        self._bias = float(bias)
        self._weights: np.ndarray | None = weight_array
        self._arena: FeatureArena | None = arena
        self._l2norm_cache: np.ndarray | None = arena.l2_norms()
        self._maxdim = resolved_maxdim

    @classmethod
    def from_support_vectors(
        cls,
        kernel: KernelConfig,
        bias: float,
        support_vectors: Iterable[Sequence[Feature]],
        weights: Sequence[float],
        maxdim: int | None = None,
    ) -> "Model":
        """Build a model from per-vector feature sequences."""
        arena = FeatureArena.from_feature_lists(support_vectors)
        return cls(kernel=kernel, bias=bias, weights=weights, arena=arena, maxdim=maxdim)

    @classmethod
    def from_dataset(
        cls,
        dataset: Dataset,
        sample_ids: Sequence[int],
        weights: Sequence[float],
        kernel: KernelConfig,
        bias: float,
    ) -> "Model":
        """Copy the selected dataset samples into a new model arena.

        The model inherits the dataset's dimensionality.
        """
        arena = dataset.arena.select(sample_ids)
        return cls(kernel=kernel, bias=bias, weights=weights, arena=arena, maxdim=dataset.maxdim)

    def _owned_attributes(self) -> tuple[str, ...]:
        return ("_arena", "_weights", "_hyperparameters", "_l2norm_cache")

    def __len__(self) -> int:
        return self.arena.span_count

    @property
    def arena(self) -> FeatureArena:
        self._require_live()
        assert self._arena is not None
        return self._arena

    @property
    def kernel(self) -> KernelConfig:
        return KernelConfig(
            kernel_type=self.kernel_type,
            hyperparameters=tuple(float(value) for value in self.hyperparameters),
        )

    @property
    def kernel_type(self) -> KernelType:
        self._require_live()
        return self._kernel_type

    @property
    def kernel_type_code(self) -> int:
        return KERNEL_TYPE_CODES[self.kernel_type]

    @property
    def hyperparameters(self) -> np.ndarray:
        self._require_live()
        assert self._hyperparameters is not None
        return self._hyperparameters

    @property
    def bias(self) -> float:
        self._require_live()
        return self._bias

    @property
    def weights(self) -> np.ndarray:
        self._require_live()
        assert self._weights is not None
        return self._weights

    @property
    def l2norm_cache(self) -> np.ndarray:
        """Sum of squared feature values for every support vector."""
        self._require_live()
        assert self._l2norm_cache is not None
        return self._l2norm_cache

    @property
    def n_elem(self) -> int:
        """Number of stored feature entries across all support vectors.

        Explicit zero-valued tokens such as ``3:0`` are stored, so they count.
        """
        return self.arena.element_count

    @property
    def maxdim(self) -> int:
        self._require_live()
        return self._maxdim

    def support_vector(self, position: int) -> SparseVector:
        return self.arena.span(position)

    def features(self, position: int) -> tuple[Feature, ...]:
        return self.support_vector(position).features()
