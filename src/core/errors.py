"""kernelio exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure class maps to one kind of caller remedy.
"""

from __future__ import annotations


class KernelIOError(Exception):
    """Base exception for all kernelio failures."""


class KernelIOConfigError(KernelIOError):
    """Raised for invalid runtime configuration or training properties."""


class KernelIOFileError(KernelIOError):
    """Raised when a source or destination cannot be opened, read, or written."""


class KernelIOFormatError(KernelIOError):
    """Raised for malformed tokens, fields, or truncated records."""


class KernelIOAllocationError(KernelIOError):
    """Raised when memory runs out while growing a feature arena."""


class KernelIOLifecycleError(KernelIOError):
    """Raised when a released dataset or model is used or released again."""
