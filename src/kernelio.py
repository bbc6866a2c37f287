"""Public SDK surface for kernelio.

This module provides a stable import path for trainers, predictors,
and tools. It re-exports the loaders, the model serializer, and the
typed models they exchange.
"""

from __future__ import annotations

from core.config import KernelIOConfig
from core.errors import (
    KernelIOAllocationError,
    KernelIOConfigError,
    KernelIOError,
    KernelIOFileError,
    KernelIOFormatError,
    KernelIOLifecycleError,
)
from core.training_spec import TrainingSpec, load_training_spec
from core.types import (
    ExecutionContext,
    Feature,
    KernelConfig,
    PredictionOptions,
    Predictor,
    Trainer,
    TrainingOptions,
)
from ingest.dataset_reader import read_labeled_dataset, read_unlabeled_dataset
from ingest.feature_arena import FeatureArena, SparseVector
from ingest.feature_codec import decode_token, encode_token
from store.kernel_model import Model
from store.lifecycle import release_dataset, release_model
from store.model_store import dumps_model, loads_model, read_model, store_model
from store.prediction_output import read_output, write_output
from store.sparse_dataset import Dataset

__all__ = [
    "Dataset",
    "ExecutionContext",
    "Feature",
    "FeatureArena",
    "KernelConfig",
    "KernelIOAllocationError",
    "KernelIOConfig",
    "KernelIOConfigError",
    "KernelIOError",
    "KernelIOFileError",
    "KernelIOFormatError",
    "KernelIOLifecycleError",
    "Model",
    "PredictionOptions",
    "Predictor",
    "SparseVector",
    "Trainer",
    "TrainingOptions",
    "TrainingSpec",
    "decode_token",
    "dumps_model",
    "encode_token",
    "load_training_spec",
    "loads_model",
    "read_labeled_dataset",
    "read_model",
    "read_output",
    "read_unlabeled_dataset",
    "release_dataset",
    "release_model",
    "store_model",
    "write_output",
]
