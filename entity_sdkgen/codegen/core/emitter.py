"""
Output buffers and file emission.

A ``GenerationBuffer`` accumulates the text of exactly one output file.
Text that depends on something resolved later goes through a placeholder
token, which must be substituted exactly once before the buffer can be
flushed. The ``Emitter`` owns the output directory and turns finished
buffers into files.
"""

import os
from pathlib import Path, PureWindowsPath
from typing import List, Union

from .errors import OutputWriteError, PlaceholderMismatchError
from ...logging_config import get_logger

logger = get_logger(__name__)

PLACEHOLDER_FORMAT = "#REPLACE_{:04d}#"


class GenerationBuffer:
    """Text accumulator for a single output file."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        self._chunks: List[str] = []
        self._pending: List[str] = []
        self._counter = 0

    def write(self, fragment: str) -> "GenerationBuffer":
        """Append a text fragment."""
        self._chunks.append(fragment)
        return self

    def reserve_placeholder(self) -> str:
        """
        Reserve a placeholder token unique within this buffer.

        The caller is expected to write the token (usually as part of a
        larger fragment) and later call ``substitute`` for it.

        Returns:
            The reserved token
        """
        self._counter += 1
        token = PLACEHOLDER_FORMAT.format(self._counter)
        self._pending.append(token)
        return token

    def insert_placeholder(self) -> str:
        """Reserve a placeholder token and write it at the current position."""
        token = self.reserve_placeholder()
        self.write(token)
        return token

    def substitute(self, token: str, replacement: str) -> int:
        """
        Replace a pending placeholder token.

        Args:
            token: Token previously returned by ``reserve_placeholder``
            replacement: Text that takes the token's place

        Returns:
            Number of occurrences replaced (always 1)

        Raises:
            PlaceholderMismatchError: If the token is not pending, or does not
                occur exactly once in the buffer
        """
        if token not in self._pending:
            raise PlaceholderMismatchError(
                f"{self.file_name}: placeholder {token} is not pending "
                f"(already substituted or never reserved)",
                token=token,
            )

        text = self.getvalue()
        occurrences = text.count(token)
        if occurrences != 1:
            raise PlaceholderMismatchError(
                f"{self.file_name}: placeholder {token} found {occurrences} times, "
                f"expected exactly once",
                token=token,
                occurrences=occurrences,
            )

        self._chunks = [text.replace(token, replacement)]
        self._pending.remove(token)
        return occurrences

    @property
    def pending_placeholders(self) -> List[str]:
        return list(self._pending)

    def getvalue(self) -> str:
        return "".join(self._chunks)

    def reset(self):
        """Drop all text and pending placeholders."""
        self._chunks = []
        self._pending = []
        self._counter = 0

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


def normalize_path(path: Union[str, Path]) -> Path:
    """Normalize directory separators for the host platform."""
    if os.name == "nt":
        return Path(PureWindowsPath(str(path)))
    return Path(str(path).replace("\\", "/"))


class Emitter:
    """Writes generation buffers into an output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = normalize_path(output_dir)

    def ensure_directory(self) -> Path:
        """
        Create the output directory and any missing parents.

        Raises:
            OutputWriteError: If the directory cannot be created
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Creating directory failed: path=%s (%s)", self.output_dir, e)
            raise OutputWriteError(
                f"Failed to create output directory {self.output_dir}: {e}",
                path=str(self.output_dir),
            ) from e
        return self.output_dir

    def new_buffer(self, file_name: str) -> GenerationBuffer:
        return GenerationBuffer(file_name)

    def target_path(self, buffer: GenerationBuffer) -> Path:
        return self.output_dir / normalize_path(buffer.file_name)

    def flush(self, buffer: GenerationBuffer) -> Path:
        """
        Write a finished buffer to its file.

        The text goes to a temporary sibling first and is renamed over the
        target, so a failed write never leaves a truncated file behind.

        Args:
            buffer: Buffer holding the complete file

        Returns:
            Path of the written file

        Raises:
            PlaceholderMismatchError: If placeholders are still pending
            OutputWriteError: If any filesystem operation fails
        """
        if buffer.pending_placeholders:
            raise PlaceholderMismatchError(
                f"{buffer.file_name}: unsubstituted placeholders at flush: "
                f"{', '.join(buffer.pending_placeholders)}",
                token=buffer.pending_placeholders[0],
            )

        path = self.target_path(buffer)
        self._make_parents(path)

        temp_path = path.with_name(f".{path.name}.tmp")
        logger.debug("Writing %s", path)

        try:
            with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
                f.write(buffer.getvalue())
            os.replace(temp_path, path)
        except OSError as e:
            logger.error("Writing %s failed: %s", path, e)
            self._discard(temp_path)
            raise OutputWriteError(f"Failed to write {path}: {e}", path=str(path)) from e

        logger.info("Wrote %s (%d bytes)", path, len(buffer))
        return path

    def _make_parents(self, path: Path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Creating directory failed: path=%s (%s)", path.parent, e)
            raise OutputWriteError(
                f"Failed to create directory {path.parent}: {e}", path=str(path.parent)
            ) from e

    def _discard(self, temp_path: Path):
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", temp_path, e)
