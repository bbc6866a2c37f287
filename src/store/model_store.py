"""Trained model persistence.

A model file is a fixed sequence of text records with no field tags::

    1                 kernel type code (linear=0, rbf=1)
    1 0.5             hyperparameter count, then the values
    -0.25             bias
    2                 support-vector count
    3                 stored feature entries (n_elem)
    3                 maxdim
    1:5.0 3:2.0 0.75  per support vector: feature tokens, then its weight
    2:4.0 -0.5

Writer and reader must agree on this order. The L2 norm cache is never
persisted; it is recomputed from the loaded features.
"""

from __future__ import annotations

import io
from typing import Iterator, NoReturn, cast

from core.constants import FEATURE_SEPARATOR, KERNEL_TYPE_CODES
from core.errors import KernelIOFileError, KernelIOFormatError
from core.logging_config import get_logger
from core.text_io import TextSource, open_text
from core.types import Feature, KernelConfig, KernelType
from ingest.feature_arena import FeatureArenaBuilder
from ingest.feature_codec import decode_features, encode_features, format_value, parse_float
from store.kernel_model import Model

_LOGGER = get_logger(__name__)
_KERNEL_TYPES_BY_CODE = {code: name for name, code in KERNEL_TYPE_CODES.items()}


def store_model(model: Model, sink: TextSource) -> None:
    """Write a model to a path or open text stream.

    Args:
        model: Live model to persist.
        sink: Destination path or writable text stream.

    Raises:
        KernelIOFileError: If the destination cannot be opened or written.
    """
    records = list(_model_records(model))
    with open_text(sink, "w") as (stream, sink_name):
        try:
            for record in records:
                stream.write(record + "\n")
            stream.flush()
        except OSError as error:
            raise KernelIOFileError(f"Failed to write model to {sink_name}: {error}.") from error
    _LOGGER.info(
        "model_stored",
        sink=sink_name,
        kernel_type=model.kernel_type,
        support_vector_count=len(model),
        n_elem=model.n_elem,
    )


def read_model(source: TextSource) -> Model:
    """Load a model from a path or open text stream.

    Args:
        source: Path or readable text stream.

    Returns:
        Model with a freshly computed L2 norm cache.

    Raises:
        KernelIOFileError: If the source cannot be opened or read.
        KernelIOFormatError: If any field is missing, malformed, or
            inconsistent with the declared counts.
    """
    with open_text(source, "r") as (stream, source_name):
        try:
            lines = stream.read().splitlines()
        except OSError as error:
            raise KernelIOFileError(f"Failed to read model at {source_name}: {error}.") from error
        except UnicodeDecodeError as error:
            raise KernelIOFormatError(
                f"Failed to decode model at {source_name}: {error.reason}."
            ) from error
    model = _ModelRecordReader(lines, source_name).read()
    _LOGGER.info(
        "model_loaded",
        source=source_name,
        kernel_type=model.kernel_type,
        support_vector_count=len(model),
        n_elem=model.n_elem,
    )
    return model


def dumps_model(model: Model) -> str:
    """Serialize a model to its text form."""
    buffer = io.StringIO()
    store_model(model, buffer)
    return buffer.getvalue()


def loads_model(text: str) -> Model:
    """Parse a model from its text form."""
    return read_model(io.StringIO(text))


def _model_records(model: Model) -> Iterator[str]:
    hyperparameters = [format_value(value) for value in model.hyperparameters]
    yield str(model.kernel_type_code)
    yield " ".join([str(len(hyperparameters)), *hyperparameters])
    yield format_value(model.bias)
    yield str(len(model))
    yield str(model.n_elem)
    yield str(model.maxdim)
    for position in range(len(model)):
        vector = model.support_vector(position)
        weight = format_value(model.weights[position])
        encoded = encode_features(vector.indices, vector.values)
        yield f"{encoded} {weight}" if encoded else weight


class _ModelRecordReader:
    """Cursor over model records that reports field and line on failure."""

    def __init__(self, lines: list[str], source_name: str) -> None:
        self._lines = lines
        self._source_name = source_name
        self._line_number = 0

    def read(self) -> Model:
        kernel_code = self._read_int("kernel type code")
        kernel_type = _KERNEL_TYPES_BY_CODE.get(kernel_code)
        if kernel_type is None:
            self._fail("kernel type code", f"unknown code {kernel_code}")
        hyperparameters = self._read_hyperparameters()
        bias = self._read_float("bias")
        support_vector_count = self._read_count("support-vector count")
        n_elem = self._read_count("n_elem")
        maxdim = self._read_count("maxdim")
        builder = FeatureArenaBuilder()
        weights: list[float] = []
        for position in range(support_vector_count):
            features, weight = self._read_support_vector(position)
            builder.append_span(features)
            weights.append(weight)
        self._expect_end()
        arena = builder.freeze()
        if arena.element_count != n_elem:
            self._fail("n_elem", f"declared {n_elem}, found {arena.element_count} feature entries")
        if arena.maxdim > maxdim:
            self._fail("maxdim", f"declared {maxdim}, found feature index {arena.maxdim}")
        kernel = KernelConfig(
            kernel_type=cast(KernelType, kernel_type), hyperparameters=hyperparameters
        )
        return Model(kernel=kernel, bias=bias, weights=weights, arena=arena, maxdim=maxdim)

    def _read_hyperparameters(self) -> tuple[float, ...]:
        tokens = self._next_tokens("hyperparameters")
        count = self._parse_int(tokens[0], "hyperparameter count")
        if count < 0 or len(tokens) - 1 != count:
            self._fail(
                "hyperparameters", f"declared {count} values, found {len(tokens) - 1}"
            )
        return tuple(
            self._parse_float(token, f"hyperparameter #{position + 1}")
            for position, token in enumerate(tokens[1:])
        )

    def _read_support_vector(self, position: int) -> tuple[list[Feature], float]:
        field_name = f"support vector #{position + 1}"
        tokens = self._next_tokens(field_name)
        weight_token = tokens[-1]
        if FEATURE_SEPARATOR in weight_token:
            self._fail(field_name, "missing trailing weight")
        weight = self._parse_float(weight_token, f"{field_name} weight")
        try:
            features = decode_features(tokens[:-1])
        except KernelIOFormatError as error:
            self._fail(field_name, str(error), error)
        return features, weight

    def _read_int(self, field_name: str) -> int:
        return self._parse_int(self._single_token(field_name), field_name)

    def _read_count(self, field_name: str) -> int:
        value = self._read_int(field_name)
        if value < 0:
            self._fail(field_name, f"expected a non-negative count, got {value}")
        return value

    def _read_float(self, field_name: str) -> float:
        return self._parse_float(self._single_token(field_name), field_name)

    def _single_token(self, field_name: str) -> str:
        tokens = self._next_tokens(field_name)
        if len(tokens) != 1:
            self._fail(field_name, f"expected 1 value, found {len(tokens)}")
        return tokens[0]

    def _next_tokens(self, field_name: str) -> list[str]:
        while self._line_number < len(self._lines):
            line = self._lines[self._line_number]
            self._line_number += 1
            tokens = line.split()
            if tokens:
                return tokens
        raise KernelIOFormatError(
            f"Truncated model at {self._source_name}: stream ended before field "
            f"'{field_name}'. The file may be incomplete."
        )

    def _expect_end(self) -> None:
        for line in self._lines[self._line_number :]:
            self._line_number += 1
            if line.strip():
                self._fail("end of model", "unexpected trailing data")

    def _parse_int(self, token: str, field_name: str) -> int:
        digits = token[1:] if token.startswith("-") else token
        if not (digits.isascii() and digits.isdigit()):
            self._fail(field_name, f"expected integer, got '{token}'")
        return int(token)

    def _parse_float(self, token: str, field_name: str) -> float:
        try:
            return parse_float(token, field_name)
        except KernelIOFormatError as error:
            self._fail(field_name, str(error), error)

    def _fail(self, field_name: str, detail: str, cause: Exception | None = None) -> NoReturn:
        raise KernelIOFormatError(
            f"Invalid model field '{field_name}' at {self._source_name}:{self._line_number}: "
            f"{detail}."
        ) from cause
