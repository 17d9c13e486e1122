"""Atomic file replacement: write to a temp file in the same directory, then rename."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from link_checker.logger import logger

PathT = Union[str, Path]


def stage_text(path: PathT, text: str, *, newline: str | None = None) -> Path:
    """Write *text* to a hidden temp file next to *path* and return the temp path."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline=newline) as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


def _keep_previous(target: Path) -> Optional[Path]:
    """Hard link (or copy) the current *target* aside; None when it does not exist yet."""
    if not target.exists():
        return None
    backup = target.with_name(f".{target.name}.{os.getpid()}.bak")
    backup.unlink(missing_ok=True)
    try:
        os.link(target, backup)
    except OSError:
        shutil.copy2(target, backup)
    return backup


def _restore(replaced: List[Tuple[Optional[Path], Path]]) -> None:
    for backup, target in reversed(replaced):
        try:
            if backup is None:
                target.unlink(missing_ok=True)
            else:
                os.replace(backup, target)
        except OSError as exc:
            logger.error("Cannot restore %s: %s", target, exc)


def commit(staged: Iterable[Tuple[Path, PathT]]) -> None:
    """
    Rename each staged temp file over its target, in the given order.

    When a rename fails, targets already replaced get their previous
    content back before the error propagates. Temp files and backups are
    removed either way.
    """
    pending = [(tmp, Path(target)) for tmp, target in staged]
    backups: List[Optional[Path]] = []
    replaced: List[Tuple[Optional[Path], Path]] = []
    try:
        for tmp, target in pending:
            backup = _keep_previous(target)
            backups.append(backup)
            os.replace(tmp, target)
            replaced.append((backup, target))
    except OSError:
        _restore(replaced)
        raise
    finally:
        for tmp, _ in pending:
            tmp.unlink(missing_ok=True)
        for backup in backups:
            if backup is not None:
                backup.unlink(missing_ok=True)
