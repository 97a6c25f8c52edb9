"""
Filesystem and PATH helpers for build commands.

- OpenMode / open_file: explicit open flags, refusing missing files unless
  CREATE is requested
- read / write_over: whole-file text access for patching
- rm, mkdir, cd, pwd, exists: small wrappers with build-friendly behavior
- normalize_path, add_env_path, tools_path: PATH manipulation for the
  bundled toolchain
"""

import logging
import os
import shutil
from enum import Flag, auto
from pathlib import Path
from typing import IO

from rnbuild.config import settings

logger = logging.getLogger(__name__)

# Separator that does not belong on this platform
FOREIGN_SEP = "/" if os.sep == "\\" else "\\"

TOOL_DIRS = ("cmake", "gcc", "ninja")


class OpenMode(Flag):
    """How open_file() opens a file."""

    READ = auto()
    WRITE = auto()
    APPEND = auto()
    CREATE = auto()
    TRUNC = auto()


def _os_flags(mode: OpenMode) -> int:
    if OpenMode.READ in mode and (OpenMode.WRITE in mode or OpenMode.APPEND in mode):
        flags = os.O_RDWR
    elif OpenMode.WRITE in mode or OpenMode.APPEND in mode:
        flags = os.O_WRONLY
    else:
        flags = os.O_RDONLY

    if OpenMode.APPEND in mode:
        flags |= os.O_APPEND
    if OpenMode.CREATE in mode:
        flags |= os.O_CREAT
    if OpenMode.TRUNC in mode:
        flags |= os.O_TRUNC
    return flags


def _py_mode(mode: OpenMode) -> str:
    readable = OpenMode.READ in mode
    if OpenMode.APPEND in mode:
        return "a+" if readable else "a"
    if OpenMode.WRITE in mode:
        return "r+" if readable else "w"
    return "r"


def open_file(path: str | Path, mode: OpenMode) -> IO[str]:
    """
    Open a text file with explicit flags.

    Line endings are preserved as-is (newline="").

    Args:
        path: File to open
        mode: Combination of OpenMode flags

    Returns:
        Open text file object

    Raises:
        FileNotFoundError: If the file is missing and CREATE is not set
    """
    path = Path(path)
    if not path.exists() and OpenMode.CREATE not in mode:
        raise FileNotFoundError(f"{path} does not exist")

    fd = os.open(path, _os_flags(mode), 0o644)
    return os.fdopen(fd, _py_mode(mode), encoding="utf-8", newline="")


def read(f: IO[str]) -> str:
    """Read the rest of an open file."""
    return f.read()


def write_over(f: IO[str], content: str) -> None:
    """Replace the whole content of an open file. Truncates before writing."""
    f.seek(0)
    f.truncate()
    f.write(content)
    f.flush()


def rm(path: str | Path) -> None:
    """Remove a file or a directory tree. Missing paths are skipped."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"{path} does not exist")
        return

    if path.is_dir():
        shutil.rmtree(path)
    else:
        path.unlink()


def mkdir(path: str | Path) -> None:
    """
    Create a directory and its parents.

    Raises:
        FileExistsError: If the path exists but is not a directory
    """
    path = Path(path)
    if path.exists() and not path.is_dir():
        raise FileExistsError(f"{path} already exists as not a directory")
    path.mkdir(parents=True, exist_ok=True)


def cd(path: str | Path) -> None:
    os.chdir(path)


def pwd() -> Path:
    return Path.cwd()


def exists(path: str | Path) -> bool:
    return Path(path).exists()


def normalize_path(path: str | Path) -> str:
    """Use this platform's separator throughout."""
    return str(path).replace(FOREIGN_SEP, os.sep)


def add_env_path(current: str, new_dir: str | Path) -> str:
    """
    Append a directory to a PATH-style string.

    Empty entries in current are dropped.
    """
    parts = [p for p in current.split(os.pathsep) if p]
    parts.append(normalize_path(new_dir))
    return os.pathsep.join(parts)


def tools_path(root: str | Path | None = None) -> str:
    """
    Build a PATH with the bundled toolchain in front.

    Args:
        root: Project root (default: current directory)

    Returns:
        <rust>/tools/{cmake,gcc,ninja} followed by the current PATH

    Raises:
        FileNotFoundError: If the tools directory does not exist
    """
    tools = Path(root or pwd()) / settings.rust_dir / "tools"
    if not tools.exists():
        raise FileNotFoundError(f"{tools} does not exist")

    path = ""
    for name in TOOL_DIRS:
        path = add_env_path(path, tools / name)
    for entry in os.environ.get("PATH", "").split(os.pathsep):
        if entry:
            path = add_env_path(path, entry)
    return path
