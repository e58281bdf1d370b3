"""Top-level module for writing generated sources."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ktpoet import kotlin_types, writer
from ktpoet.specs import FileSpec

logger = logging.getLogger(__name__)

ENCODING = "utf8"


@dataclass(frozen=True)
class SourceFile:
    """An in-memory source file, as handed to tools that consume files without touching the disk.

    Attributes:
        path: The path relative to the source root, e.g. `com/example/Greeter.kt`.
        content: The source text, encoded as UTF-8.
    """

    path: str
    content: bytes

    @property
    def char_content(self) -> str:
        return self.content.decode(ENCODING)

    def open(self) -> io.BytesIO:
        """A fresh binary stream over the content."""
        return io.BytesIO(self.content)


def relative_path(file_spec: FileSpec) -> Path:
    """The path of the file below a source root: its package directories and `<name>.kt`."""
    file_name = f"{file_spec.name}{kotlin_types.SOURCE_SUFFIX}"
    if not file_spec.package_name:
        return Path(file_name)
    return Path(*file_spec.package_name.split("."), file_name)


def to_source_file(file_spec: FileSpec) -> SourceFile:
    """Render a file into an in-memory source file.

    Args:
        file_spec: The file to render.

    Returns:
        The source file, identified by its package path.
    """
    source = writer.emit(file_spec)
    return SourceFile(path=relative_path(file_spec).as_posix(), content=source.encode(ENCODING))


def write_file(file_spec: FileSpec, directory: str | Path) -> Path:
    """Render a file and write it below a source root, creating the package directories.

    Args:
        file_spec: The file to write.
        directory: The source root.

    Returns:
        The path of the written file.

    Raises:
        ValueError: If `directory` exists but is not a directory.
    """
    directory = Path(directory)
    if directory.exists() and not directory.is_dir():
        raise ValueError(f"The path '{directory}' exists but is not a directory.")

    # Nothing is written if rendering fails.
    source = writer.emit(file_spec)

    output_path = directory / relative_path(file_spec)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding=ENCODING) as f:
        f.write(source)

    logger.info("Wrote source to '%s'.", output_path)
    return output_path


def generate_sources(file_specs: Iterable[FileSpec], output_directory: str | Path) -> list[Path]:
    """Write several files below the same source root.

    Args:
        file_specs: The files to write.
        output_directory: The source root.

    Returns:
        The paths of the written files, in the order of `file_specs`.
    """
    paths = [write_file(file_spec, output_directory) for file_spec in file_specs]
    logger.info("Generated %d source files in '%s'.", len(paths), output_directory)
    return paths
