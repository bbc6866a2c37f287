"""In-memory sparse dataset.

A dataset is an ordered collection of samples whose features live in one
shared arena. Labels and the per-sample L2 norm cache are computed when
the dataset is constructed and are read-only from then on.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.constants import DEFAULT_SPARSE_DENSITY_THRESHOLD
from core.types import Feature
from ingest.feature_arena import FeatureArena, SparseVector
from store.lifecycle import ArenaOwner


class Dataset(ArenaOwner):
    """Labeled or unlabeled samples backed by a frozen feature arena."""

    _kind = "dataset"

    def __init__(
        self,
        arena: FeatureArena,
        labels: Sequence[float] | np.ndarray | None = None,
        sparse_density_threshold: float = DEFAULT_SPARSE_DENSITY_THRESHOLD,
    ) -> None:
        """Wrap a frozen arena as a dataset.

        Args:
            arena: Frozen arena with one span per sample.
            labels: Optional per-sample targets, one per span.
            sparse_density_threshold: Fill ratio below which the dataset
                is flagged sparse.

        Raises:
            ValueError: If labels do not match the sample count.
        """
        super().__init__()
        label_array = None
        if labels is not None:
            label_array = np.array(labels, dtype=np.float64)
            if label_array.shape != (arena.span_count,):
                raise ValueError(
                    f"Expected {arena.span_count} labels, got {label_array.shape[0]}."
                )
            label_array.setflags(write=False)
        self._arena: FeatureArena | None = arena
        self._labels: np.ndarray | None = label_array
        self._l2norm_cache: np.ndarray | None = arena.l2_norms()
        self._maxdim = arena.maxdim
        self._sparse = _is_sparse(arena, sparse_density_threshold)

    def _owned_attributes(self) -> tuple[str, ...]:
        return ("_arena", "_labels", "_l2norm_cache")

    def __len__(self) -> int:
        return self.arena.span_count

    @property
    def arena(self) -> FeatureArena:
        self._require_live()
        assert self._arena is not None
        return self._arena

    @property
    def labeled(self) -> bool:
        self._require_live()
        return self._labels is not None

    @property
    def labels(self) -> np.ndarray | None:
        """Per-sample targets, or None for an unlabeled dataset."""
        self._require_live()
        return self._labels

    @property
    def sparse(self) -> bool:
        self._require_live()
        return self._sparse

    @property
    def maxdim(self) -> int:
        self._require_live()
        return self._maxdim

    @property
    def l2norm_cache(self) -> np.ndarray:
        """Sum of squared feature values for every sample."""
        self._require_live()
        assert self._l2norm_cache is not None
        return self._l2norm_cache

    def sample(self, position: int) -> SparseVector:
        """Return the features of one sample as a read-only view."""
        return self.arena.span(position)

    def features(self, position: int) -> tuple[Feature, ...]:
        return self.sample(position).features()

    def dense_matrix(self) -> np.ndarray:
        """Return the samples as an ``(n_samples, maxdim)`` positional matrix."""
        arena = self.arena
        matrix = np.zeros((arena.span_count, self._maxdim), dtype=np.float64)
        rows = np.repeat(np.arange(arena.span_count), arena.counts)
        matrix[rows, arena.indices - 1] = arena.values
        return matrix


def _is_sparse(arena: FeatureArena, density_threshold: float) -> bool:
    dense_cells = arena.span_count * arena.maxdim
    if dense_cells == 0:
        return True
    return arena.element_count < density_threshold * dense_cells
