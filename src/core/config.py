"""Runtime configuration model for kernelio.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_SPARSE_DENSITY_THRESHOLD, DEFAULT_THREAD_COUNT
from core.errors import KernelIOConfigError
from core.types import ExecutionContext


@dataclass(frozen=True)
class KernelIOConfig:
    """Validated runtime configuration.

    Attributes:
        thread_count: Worker threads handed to trainer and predictor collaborators.
        sparse_density_threshold: Fill ratio below which a dataset is flagged sparse.
    """

    thread_count: int = DEFAULT_THREAD_COUNT
    sparse_density_threshold: float = DEFAULT_SPARSE_DENSITY_THRESHOLD

    @classmethod
    def from_env(cls) -> "KernelIOConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            KernelIOConfigError: If environment values are invalid.
        """
        thread_value = os.getenv("KERNELIO_THREADS", str(DEFAULT_THREAD_COUNT))
        density_value = os.getenv(
            "KERNELIO_SPARSE_DENSITY", str(DEFAULT_SPARSE_DENSITY_THRESHOLD)
        )
        return cls(
            thread_count=_parse_thread_count(thread_value),
            sparse_density_threshold=_parse_density_threshold(density_value),
        )

    def execution_context(self) -> ExecutionContext:
        """Return the execution-only settings for collaborators."""
        return ExecutionContext(thread_count=self.thread_count)


def _parse_thread_count(raw_value: str) -> int:
    """Parse the thread count environment value.

    Raises:
        KernelIOConfigError: If value is not a positive integer.
    """
    try:
        thread_count = int(raw_value)
    except ValueError as error:
        raise KernelIOConfigError(
            "Invalid KERNELIO_THREADS value: "
            f"expected integer, got '{raw_value}'. "
            "Set KERNELIO_THREADS to a positive number."
        ) from error
    if thread_count < 1:
        raise KernelIOConfigError(
            f"Invalid KERNELIO_THREADS value {thread_count}: expected value >= 1."
        )
    return thread_count


def _parse_density_threshold(raw_value: str) -> float:
    """Parse the sparse density threshold environment value.

    Raises:
        KernelIOConfigError: If value is not a float in (0, 1].
    """
    try:
        threshold = float(raw_value)
    except ValueError as error:
        raise KernelIOConfigError(
            "Invalid KERNELIO_SPARSE_DENSITY value: "
            f"expected float, got '{raw_value}'."
        ) from error
    if not 0.0 < threshold <= 1.0:
        raise KernelIOConfigError(
            f"Invalid KERNELIO_SPARSE_DENSITY value {threshold}: expected 0 < value <= 1."
        )
    return threshold
