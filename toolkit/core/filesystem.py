"""Filesystem helpers."""

from __future__ import annotations

import logging
import os

from .config import DEFAULT_DIR_MODE

logger = logging.getLogger(__name__)


def create_dir_if_not_exist(path: str | os.PathLike[str], mode: int = DEFAULT_DIR_MODE) -> None:
    """
    Create path and any missing parents, each with mode.

    Any existing path counts as success, including a regular file; callers
    that need a real directory must check for it themselves.
    """
    missing: list[str] = []
    current = os.path.abspath(path)
    while not os.path.exists(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    for directory in reversed(missing):
        try:
            os.mkdir(directory, mode)
        except FileExistsError:
            # lost a race with another request creating the same path
            continue
        logger.debug("created directory %s", directory)
