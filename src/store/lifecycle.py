"""Ownership and release of arena-backed structures.

A dataset or model owns its arena, span table, and every derived cache
as one unit. Releasing the unit drops all of them together; any later
access, including a second release, raises ``KernelIOLifecycleError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.errors import KernelIOLifecycleError
from core.logging_config import get_logger

if TYPE_CHECKING:
    from store.kernel_model import Model
    from store.sparse_dataset import Dataset

_LOGGER = get_logger(__name__)


class ArenaOwner:
    """Base for structures that own a feature arena and its caches."""

    _kind = "structure"

    def __init__(self) -> None:
        self._released = False

    @property
    def is_released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop the arena, span table, and caches in one step.

        Raises:
            KernelIOLifecycleError: If the structure was already released.
        """
        self._require_live()
        element_count = self._arena.element_count
        for attribute_name in self._owned_attributes():
            setattr(self, attribute_name, None)
        self._released = True
        _LOGGER.debug("arena_released", kind=self._kind, element_count=element_count)

    def _owned_attributes(self) -> tuple[str, ...]:
        raise NotImplementedError

    def _require_live(self) -> None:
        if self._released:
            raise KernelIOLifecycleError(
                f"This {self._kind} has been released and can no longer be used. "
                f"Load a new {self._kind} instead."
            )

    def __enter__(self) -> Any:
        self._require_live()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self._released:
            self.release()


def release_dataset(dataset: "Dataset") -> None:
    """Release every buffer owned by a dataset.

    Args:
        dataset: Live dataset; it must not be used afterwards.

    Raises:
        KernelIOLifecycleError: If the dataset was already released.
    """
    dataset.release()


def release_model(model: "Model") -> None:
    """Release every buffer owned by a model.

    Args:
        model: Live model; it must not be used afterwards.

    Raises:
        KernelIOLifecycleError: If the model was already released.
    """
    model.release()
