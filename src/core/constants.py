"""Core constants used across kernelio modules.

This module centralizes format literals and runtime defaults.
Keeping values here avoids magic literals in parsing logic.
"""

from __future__ import annotations

FEATURE_SEPARATOR = ":"
MAX_FEATURE_INDEX = 2**63 - 1
FILE_ENCODING = "utf-8"
KERNEL_TYPE_CODES = {"linear": 0, "rbf": 1}
DEFAULT_THREAD_COUNT = 1
DEFAULT_SPARSE_DENSITY_THRESHOLD = 0.5
DEFAULT_NOISE_PARAM = 1.0
DEFAULT_CONVERGENCE_ETA = 1e-3
TRAINING_SPEC_VERSION = 1
