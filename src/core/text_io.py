"""Scoped text source and sink handling.

Readers and writers accept either a filesystem path or an already open
text stream. Paths are opened and closed inside one call; streams are
borrowed and left open for their owner.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Union

from core.constants import FILE_ENCODING
from core.errors import KernelIOFileError

TextSource = Union[str, Path, TextIO]


@contextmanager
def open_text(source: TextSource, mode: str) -> Iterator[tuple[TextIO, str]]:
    """Yield a text stream and a display name for error messages.

    Args:
        source: Path or open text stream.
        mode: ``"r"`` or ``"w"``; only used for paths.

    Raises:
        KernelIOFileError: If a path cannot be opened.
    """
    if not isinstance(source, (str, Path)):
        yield source, _stream_name(source)
        return
    file_path = Path(source).expanduser()
    try:
        stream = file_path.open(mode, encoding=FILE_ENCODING, newline="" if "w" in mode else None)
    except OSError as error:
        action = "write" if "w" in mode else "read"
        raise KernelIOFileError(
            f"Failed to open {file_path} to {action}: {error.strerror or error}. "
            "Check the path exists and is accessible."
        ) from error
    with stream:
        yield stream, str(file_path)


def _stream_name(stream: TextIO) -> str:
    return str(getattr(stream, "name", "<stream>"))
