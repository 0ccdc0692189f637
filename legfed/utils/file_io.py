"""
File I/O helpers shared by the flat-file converters.
"""

import gzip
from pathlib import Path
from typing import TextIO


def open_file(
    filepath: Path,
    mode: str = "r",
    gzip_aware: bool = True,
    encoding: str = "utf-8",
) -> TextIO:
    """
    Open a file, automatically handling gzipped files.

    Args:
        filepath: Path to file
        mode: File mode ('r', 'w', 'a', etc.)
        gzip_aware: Automatically detect and handle gzipped files
        encoding: Text encoding

    Returns:
        File handle
    """
    filepath_str = str(filepath)
    is_gzip = filepath_str.endswith(".gz") or filepath_str.endswith(".gzip")

    if gzip_aware and is_gzip:
        if "b" not in mode and "t" not in mode:
            mode = mode + "t"
        return gzip.open(filepath, mode, encoding=encoding)
    return open(filepath, mode, encoding=encoding)


def is_readme(filepath: Path) -> bool:
    """README files sit next to datastore data files and are never converted."""
    return "README" in Path(filepath).name


def split_line(line: str) -> list[str]:
    """Split a tab-delimited line, dropping the line terminator."""
    return line.rstrip("\n\r").split("\t")


def is_comment_or_blank(line: str) -> bool:
    return line.startswith("#") or not line.strip()
