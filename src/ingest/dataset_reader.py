"""Sparse dataset readers.

This module loads labeled and unlabeled datasets in libsvm text format::

    +1 1:5 3:2
    -1 2:4

The whole source is parsed before a dataset is returned. Any malformed
line aborts the load, so callers never observe a partially built dataset.
"""

from __future__ import annotations

from array import array

from core.config import KernelIOConfig
from core.constants import FEATURE_SEPARATOR
from core.errors import KernelIOFileError, KernelIOFormatError
from core.logging_config import get_logger
from core.text_io import TextSource, open_text
from ingest.feature_arena import FeatureArenaBuilder
from ingest.feature_codec import decode_features, parse_float
from store.sparse_dataset import Dataset

_LOGGER = get_logger(__name__)


def read_labeled_dataset(source: TextSource, config: KernelIOConfig | None = None) -> Dataset:
    """Load a dataset whose lines start with a numeric label.

    Args:
        source: Path or open text stream.
        config: Optional runtime configuration; read from env when omitted.

    Returns:
        Labeled dataset with one sample per non-blank line.

    Raises:
        KernelIOFileError: If the source cannot be opened or read.
        KernelIOFormatError: If any line is malformed.
        KernelIOAllocationError: If the feature arena cannot grow.
    """
    return _read_dataset(source, labeled=True, config=config)


def read_unlabeled_dataset(source: TextSource, config: KernelIOConfig | None = None) -> Dataset:
    """Load a dataset whose lines hold only feature tokens.

    Args:
        source: Path or open text stream.
        config: Optional runtime configuration; read from env when omitted.

    Returns:
        Unlabeled dataset with one sample per non-blank line.

    Raises:
        KernelIOFileError: If the source cannot be opened or read.
        KernelIOFormatError: If any token is malformed.
        KernelIOAllocationError: If the feature arena cannot grow.
    """
    return _read_dataset(source, labeled=False, config=config)


def _read_dataset(source: TextSource, labeled: bool, config: KernelIOConfig | None) -> Dataset:
    builder = FeatureArenaBuilder()
    labels = array("d")
    with open_text(source, "r") as (stream, source_name):
        line_number = 0
        try:
            for line_number, line in enumerate(stream, 1):
                tokens = line.split()
                if not tokens:
                    continue
                _append_sample(builder, labels, tokens, labeled, source_name, line_number)
        except OSError as error:
            raise KernelIOFileError(
                f"Failed to read dataset at {source_name} after line {line_number}: {error}."
            ) from error
        except UnicodeDecodeError as error:
            raise KernelIOFormatError(
                f"Failed to decode dataset at {source_name}:{line_number + 1}: {error.reason}. "
                "Save the file as UTF-8 text."
            ) from error
    runtime_config = config or KernelIOConfig.from_env()
    dataset = Dataset(
        arena=builder.freeze(),
        labels=labels if labeled else None,
        sparse_density_threshold=runtime_config.sparse_density_threshold,
    )
    _LOGGER.info(
        "dataset_loaded",
        source=source_name,
        sample_count=len(dataset),
        element_count=dataset.arena.element_count,
        maxdim=dataset.maxdim,
        labeled=dataset.labeled,
        sparse=dataset.sparse,
    )
    return dataset


def _append_sample(
    builder: FeatureArenaBuilder,
    labels: array,
    tokens: list[str],
    labeled: bool,
    source_name: str,
    line_number: int,
) -> None:
    """Parse one non-blank line into the arena and label buffer.

    Raises:
        KernelIOFormatError: With file and line context on any bad token.
    """
    feature_tokens = tokens
    try:
        if labeled:
            label = _parse_label(tokens[0])
            feature_tokens = tokens[1:]
        features = decode_features(feature_tokens)
        builder.append_span(features)
    except KernelIOFormatError as error:
        raise KernelIOFormatError(
            f"Failed to parse dataset at {source_name}:{line_number}: {error}"
        ) from error
    if labeled:
        labels.append(label)


def _parse_label(token: str) -> float:
    if FEATURE_SEPARATOR in token:
        raise KernelIOFormatError(
            f"Expected a numeric label before feature tokens, got '{token}'."
        )
    return parse_float(token, "label")
