"""Shared feature arena storage.

This module stores the features of many samples in one pair of
contiguous numpy arrays. Each sample owns only an ``(offset, count)``
span into those arrays. A builder grows the arena while a file is
parsed; ``freeze`` turns it into a read-only arena whose derived
caches are computed exactly once.
"""

from __future__ import annotations

from array import array
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from core.errors import KernelIOAllocationError, KernelIOFormatError
from core.types import Feature

_FIELD_DTYPES = (
    ("indices", np.int64),
    ("values", np.float64),
    ("offsets", np.int64),
    ("counts", np.int64),
)


@dataclass(frozen=True, eq=False)
class SparseVector:
    """Read-only view of one span.

    Attributes:
        indices: One-based feature indices in source order.
        values: Feature values aligned with ``indices``.
    """

    indices: np.ndarray
    values: np.ndarray

    def __len__(self) -> int:
        return int(self.indices.shape[0])

    def features(self) -> tuple[Feature, ...]:
        """Return the span as typed features."""
        return tuple(
            Feature(index=int(index), value=float(value))
            for index, value in zip(self.indices, self.values)
        )


@dataclass(frozen=True, eq=False)
class FeatureArena:
    """Frozen arena plus span table.

    Construction copies every field into a fresh read-only array, so the
    caller's buffers stay untouched.

    Attributes:
        indices: Feature indices of every span, concatenated.
        values: Feature values of every span, concatenated.
        offsets: Start position of each span.
        counts: Length of each span.
    """

    indices: np.ndarray
    values: np.ndarray
    offsets: np.ndarray
    counts: np.ndarray

    def __post_init__(self) -> None:
        for field_name, dtype in _FIELD_DTYPES:
            field_array = np.array(getattr(self, field_name), dtype=dtype)
            field_array.setflags(write=False)
            object.__setattr__(self, field_name, field_array)
        if self.values.shape != self.indices.shape or self.indices.ndim != 1:
            raise ValueError("Feature indices and values must be 1-D arrays of equal length.")
        if self.counts.shape != self.offsets.shape or self.offsets.ndim != 1:
            raise ValueError("Span offsets and counts must be 1-D arrays of equal length.")
        if np.any(self.offsets < 0) or np.any(self.counts < 0):
            raise ValueError("Span offsets and counts must be non-negative.")
        if np.any(self.offsets + self.counts > self.indices.shape[0]):
            raise ValueError("Feature span exceeds arena bounds.")

    @classmethod
    def from_feature_lists(cls, feature_lists: Iterable[Sequence[Feature]]) -> "FeatureArena":
        """Build a frozen arena from per-span feature sequences."""
        builder = FeatureArenaBuilder()
        for features in feature_lists:
            builder.append_span(features)
        return builder.freeze()

    @property
    def span_count(self) -> int:
        return int(self.offsets.shape[0])

    @property
    def element_count(self) -> int:
        """Number of stored feature entries across all spans."""
        return int(self.indices.shape[0])

    @property
    def maxdim(self) -> int:
        """Largest feature index in the arena, 0 when empty."""
        if self.indices.shape[0] == 0:
            return 0
        return int(self.indices.max())

    def span(self, position: int) -> SparseVector:
        """Return one span as a read-only view.

        Raises:
            IndexError: If position is outside the span table.
        """
        if not 0 <= position < self.span_count:
            raise IndexError(
                f"Span {position} out of range for arena with {self.span_count} spans."
            )
        start = int(self.offsets[position])
        stop = start + int(self.counts[position])
        return SparseVector(indices=self.indices[start:stop], values=self.values[start:stop])

    def l2_norms(self) -> np.ndarray:
        """Compute the sum of squared values of every span."""
        owners = np.repeat(np.arange(self.span_count), self.counts)
        norms = np.bincount(owners, weights=self.values * self.values, minlength=self.span_count)
        norms = norms.astype(np.float64)
        norms.setflags(write=False)
        return norms

    def select(self, positions: Sequence[int]) -> "FeatureArena":
        """Copy the chosen spans, in the given order, into a new arena."""
        return FeatureArena.from_feature_lists(
            self.span(int(position)).features() for position in positions
        )


class FeatureArenaBuilder:
    """Growable arena used while a source is parsed."""

    def __init__(self) -> None:
        self._indices = array("q")
        self._values = array("d")
        self._offsets = array("q")
        self._counts = array("q")

    def append_span(self, features: Sequence[Feature]) -> None:
        """Append one span holding ``features``.

        Raises:
            KernelIOAllocationError: If the arena cannot grow.
            KernelIOFormatError: If an index does not fit a 64-bit slot.
        """
        try:
            self._offsets.append(len(self._indices))
            self._counts.append(len(features))
            self._indices.extend(feature.index for feature in features)
            self._values.extend(feature.value for feature in features)
        except MemoryError as error:
            raise KernelIOAllocationError(
                f"Out of memory growing feature arena at {len(self._indices)} entries."
            ) from error
        except OverflowError as error:
            raise KernelIOFormatError(
                f"Feature index out of range for the arena: {error}."
            ) from error

    def freeze(self) -> FeatureArena:
        """Stop growth and return the read-only arena.

        Raises:
            KernelIOAllocationError: If the final arrays cannot be allocated.
        """
        try:
            arena = FeatureArena(
                indices=self._indices,
                values=self._values,
                offsets=self._offsets,
                counts=self._counts,
            )
        except MemoryError as error:
            raise KernelIOAllocationError(
                f"Out of memory freezing feature arena of {len(self._indices)} entries."
            ) from error
        self._indices = array("q")
        self._values = array("d")
        self._offsets = array("q")
        self._counts = array("q")
        return arena
