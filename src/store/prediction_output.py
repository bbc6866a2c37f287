"""Prediction score persistence.

Scores are written one per line in the order of the scored dataset's
samples, using the same canonical decimal form as model files.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.errors import KernelIOFileError, KernelIOFormatError
from core.logging_config import get_logger
from core.text_io import TextSource, open_text
from ingest.feature_codec import format_value, parse_float

_LOGGER = get_logger(__name__)


def write_output(
    destination: TextSource,
    predictions: Sequence[float] | np.ndarray,
    count: int | None = None,
) -> None:
    """Write the first ``count`` prediction scores, one per line.

    Args:
        destination: Path or writable text stream.
        predictions: Ordered prediction scores.
        count: Number of scores to write; all of them when omitted.

    Raises:
        ValueError: If count is negative or exceeds the number of scores.
        KernelIOFileError: If the destination cannot be created or written.
    """
    score_count = len(predictions) if count is None else count
    if not 0 <= score_count <= len(predictions):
        raise ValueError(
            f"Cannot write {score_count} predictions from an array of {len(predictions)}."
        )
    lines = [format_value(predictions[position]) + "\n" for position in range(score_count)]
    with open_text(destination, "w") as (stream, destination_name):
        try:
            stream.writelines(lines)
            stream.flush()
        except OSError as error:
            raise KernelIOFileError(
                f"Failed to write predictions to {destination_name}: {error}."
            ) from error
    _LOGGER.info("predictions_written", destination=destination_name, count=score_count)


def read_output(source: TextSource) -> np.ndarray:
    """Read prediction scores written by ``write_output``.

    Raises:
        KernelIOFileError: If the source cannot be opened or read.
        KernelIOFormatError: If a line is not a single finite number.
    """
    scores: list[float] = []
    line_number = 0
    with open_text(source, "r") as (stream, source_name):
        try:
            for line_number, line in enumerate(stream, 1):
                text = line.strip()
                if not text:
                    continue
                scores.append(parse_float(text, f"predictions at {source_name}:{line_number}"))
        except OSError as error:
            raise KernelIOFileError(
                f"Failed to read predictions at {source_name}: {error}."
            ) from error
        except UnicodeDecodeError as error:
            raise KernelIOFormatError(
                f"Failed to decode predictions at {source_name}:{line_number + 1}: "
                f"{error.reason}. Save the file as UTF-8 text."
            ) from error
    return np.array(scores, dtype=np.float64)
