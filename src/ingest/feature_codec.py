"""Sparse feature token codec.

This module converts between ``index:value`` text tokens and typed
features. It also owns the canonical decimal rendering shared by the
model serializer and the prediction writer, so every float written by
kernelio reads back to the identical value.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from core.constants import FEATURE_SEPARATOR, MAX_FEATURE_INDEX
from core.errors import KernelIOFormatError
from core.types import Feature


def decode_token(text: str) -> Feature:
    """Decode one ``index:value`` token.

    Args:
        text: Raw token without surrounding whitespace.

    Returns:
        Parsed feature.

    Raises:
        KernelIOFormatError: If the separator is missing, the index is not
            a positive integer, or the value is not a finite number.
    """
    index_text, separator, value_text = text.partition(FEATURE_SEPARATOR)
    if not separator:
        raise KernelIOFormatError(
            f"Invalid feature token '{text}': missing '{FEATURE_SEPARATOR}' separator. "
            "Expected <index>:<value>."
        )
    index = parse_index(index_text, text)
    value = parse_float(value_text, f"feature token '{text}'")
    return Feature(index=index, value=value)


def encode_token(feature: Feature) -> str:
    """Encode one feature as an ``index:value`` token."""
    return f"{feature.index}{FEATURE_SEPARATOR}{format_value(feature.value)}"


def decode_features(tokens: Iterable[str]) -> list[Feature]:
    """Decode a token sequence, applying the duplicate-index policy.

    A repeated index within one sample keeps the position of its first
    occurrence and takes the value of its last occurrence.
    """
    features: list[Feature] = []
    positions: dict[int, int] = {}
    for token in tokens:
        feature = decode_token(token)
        position = positions.get(feature.index)
        if position is None:
            positions[feature.index] = len(features)
            features.append(feature)
        else:
            features[position] = feature
    return features


def encode_features(indices: Sequence[int], values: Sequence[float]) -> str:
    """Encode parallel index/value sequences as space-separated tokens."""
    return " ".join(
        encode_token(Feature(index=int(index), value=float(value)))
        for index, value in zip(indices, values)
    )


def parse_index(index_text: str, token: str) -> int:
    """Parse a one-based feature index.

    Raises:
        KernelIOFormatError: If the text is not a positive base-10 integer
            that fits a 64-bit index.
    """
    if not (index_text.isascii() and index_text.isdigit()):
        raise KernelIOFormatError(
            f"Invalid feature token '{token}': index '{index_text}' is not a positive integer."
        )
    index = int(index_text)
    if index < 1:
        raise KernelIOFormatError(
            f"Invalid feature token '{token}': index {index} must be >= 1."
        )
    if index > MAX_FEATURE_INDEX:
        raise KernelIOFormatError(
            f"Invalid feature token '{token}': index {index} exceeds {MAX_FEATURE_INDEX}."
        )
    return index


def parse_float(text: str, context: str) -> float:
    """Parse a finite decimal value.

    Args:
        text: Raw numeric text.
        context: Human-readable description of where the value came from.

    Returns:
        Parsed float.

    Raises:
        KernelIOFormatError: If the text is not a finite number.
    """
    if "_" in text:
        raise KernelIOFormatError(f"Invalid number '{text}' in {context}.")
    try:
        value = float(text)
    except ValueError as error:
        raise KernelIOFormatError(f"Invalid number '{text}' in {context}.") from error
    if not math.isfinite(value):
        raise KernelIOFormatError(
            f"Invalid number '{text}' in {context}: value must be finite."
        )
    return value


def format_value(value: float) -> str:
    """Render a float with the shortest decimal that reads back exactly."""
    return repr(float(value))
