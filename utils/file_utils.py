from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__: list[str] = [
    "FileMissingError",
    "FilePermissionError",
    "FileUtils",
    "FileUtilsError",
    "InvalidFileTypeError",
]


class FileUtils:
    """File helpers with safety checks for the cache and prompt files."""

    @staticmethod
    def check_file_status(file_path: Path) -> None:
        """Check that ``file_path`` is an existing regular file.

        Args:
            file_path (Path): The path to check.

        Raises:
            FileMissingError: If the file does not exist.
            InvalidFileTypeError: If the path is a directory or a symbolic link.
        """
        if not file_path.exists():
            msg = f"File does not exist: {file_path}"
            raise FileMissingError(msg)
        if file_path.is_dir() or file_path.is_symlink():
            msg = f"Invalid file type (directory or symbolic link): {file_path}"
            raise InvalidFileTypeError(msg)

    @staticmethod
    def remove(file_path: Path) -> None:
        """Remove a regular file.

        Args:
            file_path (Path): The file to remove.

        Raises:
            FileMissingError: If the file does not exist.
            InvalidFileTypeError: If the path is a directory or a symbolic link.
            FilePermissionError: If the file cannot be deleted.
        """
        FileUtils.check_file_status(file_path)
        try:
            file_path.unlink(missing_ok=True)
        except PermissionError as err:
            msg = f"Insufficient permissions to delete the file: {file_path}"
            raise FilePermissionError(msg) from err

    @staticmethod
    def resolve_path(path: str | Path) -> Path:
        """Convert a user-supplied path to an absolute path.

        Expands environment variables and ``~``; relative paths are resolved against the
        current working directory.

        Args:
            path (str | Path): The input path (e.g., "~/games/$TITLE/translation_cache").

        Returns:
            Path: The absolute path.
        """
        expanded: str = os.path.expandvars(str(path))
        user_expanded: Path = Path(expanded).expanduser()
        if user_expanded.is_absolute():
            return user_expanded.resolve()
        return (Path.cwd() / user_expanded).resolve()

    @staticmethod
    def write_text_atomic(file_path: Path, content: str, *, encoding: str = "utf-8") -> None:
        """Write ``content`` to a sibling temporary file and move it over ``file_path``.

        A crash during the write leaves the previous file intact.

        Raises:
            OSError: If the temporary file cannot be written or moved into place.
        """
        fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding=encoding) as fp:
                fp.write(content)
            tmp_path.replace(file_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


class FileUtilsError(Exception):
    """Base exception for FileUtils errors."""


class FileMissingError(FileUtilsError):
    """The file does not exist."""


class InvalidFileTypeError(FileUtilsError):
    """The path is not a regular file."""


class FilePermissionError(FileUtilsError):
    """The file cannot be modified with the current permissions."""
