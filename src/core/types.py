"""Shared typed models.

This module defines immutable value types used by the codec, loader,
and serializer, plus the collaborator interfaces that consume them.
Persistence-relevant kernel settings are kept apart from execution
settings so only the former ever reach a model file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, Sequence

from core.constants import DEFAULT_CONVERGENCE_ETA, DEFAULT_NOISE_PARAM, DEFAULT_THREAD_COUNT

if TYPE_CHECKING:
    from store.kernel_model import Model
    from store.sparse_dataset import Dataset

KernelType = Literal["linear", "rbf"]


@dataclass(frozen=True)
class Feature:
    """One sparse feature entry.

    Attributes:
        index: One-based feature index.
        value: Feature value.
    """

    index: int
    value: float


@dataclass(frozen=True)
class KernelConfig:
    """Kernel settings persisted with a trained model.

    Attributes:
        kernel_type: Kernel function name.
        hyperparameters: Kernel hyperparameter vector, e.g. the RBF width.
    """

    kernel_type: KernelType
    hyperparameters: tuple[float, ...] = ()


@dataclass(frozen=True)
class TrainingOptions:
    """Optimization settings consumed by a trainer.

    Attributes:
        noise_param: Noise power of the classifier.
        convergence_eta: Convergence criterion.
    """

    noise_param: float = DEFAULT_NOISE_PARAM
    convergence_eta: float = DEFAULT_CONVERGENCE_ETA


@dataclass(frozen=True)
class PredictionOptions:
    """Prediction settings consumed by a predictor.

    Attributes:
        labeled: Whether the evaluated dataset carries labels.
    """

    labeled: bool = False


@dataclass(frozen=True)
class ExecutionContext:
    """Execution-only settings, never persisted.

    Attributes:
        thread_count: Number of worker threads.
    """

    thread_count: int = DEFAULT_THREAD_COUNT


class Trainer(Protocol):
    """Collaborator that turns a dataset into a model."""

    def train(
        self,
        dataset: "Dataset",
        kernel: KernelConfig,
        options: TrainingOptions,
        context: ExecutionContext,
    ) -> "Model": ...


class Predictor(Protocol):
    """Collaborator that scores a dataset with a model."""

    def predict(
        self,
        model: "Model",
        dataset: "Dataset",
        options: PredictionOptions,
        context: ExecutionContext,
    ) -> Sequence[float]: ...
