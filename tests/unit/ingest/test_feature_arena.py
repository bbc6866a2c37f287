"""Unit tests for feature arena storage."""

from __future__ import annotations

from array import array

import numpy as np
import pytest

import ingest.feature_arena as feature_arena
from core.errors import KernelIOAllocationError, KernelIOFormatError
from core.types import Feature
from ingest.feature_arena import FeatureArena, FeatureArenaBuilder


def _arena() -> FeatureArena:
    return FeatureArena.from_feature_lists(
        [
            [Feature(1, 5.0), Feature(3, 2.0)],
            [],
            [Feature(2, 4.0)],
        ]
    )


def test_builder_records_spans_into_one_buffer() -> None:
    """Each span should be an offset and count into shared arrays."""
    arena = _arena()

    assert arena.offsets.tolist() == [0, 2, 2]
    assert arena.counts.tolist() == [2, 0, 1]
    assert arena.indices.tolist() == [1, 3, 2]


def test_span_returns_features_in_source_order() -> None:
    """Span views should preserve token order."""
    assert _arena().span(0).features() == (Feature(1, 5.0), Feature(3, 2.0))


def test_empty_span_has_zero_length() -> None:
    """A sample without features is a valid empty span."""
    assert len(_arena().span(1)) == 0


def test_span_rejects_out_of_range_position() -> None:
    """Positions outside the span table should raise IndexError."""
    with pytest.raises(IndexError):
        _arena().span(3)


def test_l2_norms_are_sums_of_squares() -> None:
    """Norm cache should equal the sum of squared values per span."""
    assert _arena().l2_norms().tolist() == [29.0, 0.0, 16.0]


def test_maxdim_is_zero_for_empty_arena() -> None:
    """An arena without entries has no dimensions."""
    arena = FeatureArenaBuilder().freeze()

    assert (arena.maxdim, arena.span_count, arena.l2_norms().shape) == (0, 0, (0,))


def test_frozen_arena_is_read_only() -> None:
    """Arrays should reject writes after freezing."""
    arena = _arena()

    with pytest.raises(ValueError):
        arena.values[0] = 1.0


def test_arena_rejects_span_past_buffer_end() -> None:
    """Spans must lie within arena bounds."""
    with pytest.raises(ValueError):
        FeatureArena(
            indices=np.array([1], dtype=np.int64),
            values=np.array([1.0]),
            offsets=np.array([0], dtype=np.int64),
            counts=np.array([2], dtype=np.int64),
        )


def test_select_copies_spans_in_requested_order() -> None:
    """Selected spans should land in a new arena in the given order."""
    selected = _arena().select([2, 0])

    assert selected.span(0).features() == (Feature(2, 4.0),)
    assert selected.offsets.tolist() == [0, 1]


def test_arena_rejects_values_shorter_than_indices() -> None:
    """Indices and values must be parallel arrays."""
    with pytest.raises(ValueError):
        FeatureArena(
            indices=np.array([1, 2], dtype=np.int64),
            values=np.array([1.0]),
            offsets=np.array([0], dtype=np.int64),
            counts=np.array([1], dtype=np.int64),
        )


def test_arena_rejects_negative_offset() -> None:
    """Span offsets below zero do not address the arena."""
    with pytest.raises(ValueError):
        FeatureArena(
            indices=np.array([1, 2], dtype=np.int64),
            values=np.array([1.0, 2.0]),
            offsets=np.array([-1], dtype=np.int64),
            counts=np.array([1], dtype=np.int64),
        )


def test_arena_leaves_caller_arrays_writable() -> None:
    """Freezing copies the inputs instead of locking the caller's buffers."""
    values = np.array([1.0, 2.0])

    arena = FeatureArena(
        indices=np.array([1, 2], dtype=np.int64),
        values=values,
        offsets=np.array([0], dtype=np.int64),
        counts=np.array([2], dtype=np.int64),
    )
    values[0] = 9.0

    assert values.flags.writeable is True
    assert arena.values.tolist() == [1.0, 2.0]
    assert arena.values.flags.writeable is False


def test_append_span_rejects_index_beyond_64_bits() -> None:
    """Indices that overflow the int64 arena are a format error."""
    builder = FeatureArenaBuilder()

    with pytest.raises(KernelIOFormatError):
        builder.append_span([Feature(2**64, 1.0)])


def test_append_span_maps_memory_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Arena growth failures surface as allocation errors."""

    class _ExhaustedArray(array):
        def extend(self, items):
            raise MemoryError

    monkeypatch.setattr(feature_arena, "array", _ExhaustedArray)
    builder = FeatureArenaBuilder()

    with pytest.raises(KernelIOAllocationError):
        builder.append_span([Feature(1, 1.0)])


def test_freeze_maps_memory_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Failing to allocate the frozen arrays is an allocation error."""

    def _exhausted(**_fields):
        raise MemoryError

    builder = FeatureArenaBuilder()
    builder.append_span([Feature(1, 1.0)])
    monkeypatch.setattr(feature_arena, "FeatureArena", _exhausted)

    with pytest.raises(KernelIOAllocationError):
        builder.freeze()
