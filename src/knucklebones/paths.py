"""Data locations and git provenance.

``KNUCKLEBONES_DATA_DIR`` overrides where exports land; otherwise they go to
``data/`` under the repository root (or the current directory when the
package is installed outside a checkout).
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional


def repo_root() -> Path:
    here = Path(__file__).resolve()
    for parent in list(here.parents)[:5]:
        if (parent / ".git").exists():
            return parent
    return Path.cwd()


def data_dir() -> Path:
    env = os.getenv("KNUCKLEBONES_DATA_DIR")
    return Path(env) if env else repo_root() / "data"


def _git(*args: str) -> Optional[str]:
    try:
        return subprocess.check_output(
            ["git", "-C", str(repo_root()), *args],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        ).strip()
    except (OSError, subprocess.SubprocessError):
        return None


def get_git_commit() -> Optional[str]:
    return _git("rev-parse", "HEAD") or None


def get_git_is_dirty() -> Optional[bool]:
    """True with uncommitted changes, False when clean, None outside a repo."""
    out = _git("status", "--porcelain")
    return None if out is None else len(out) > 0
