from __future__ import annotations

import os
from typing import List, Optional

from .config import DEFAULT_NCBI_KEY_FILE, NCBI_API_KEY_ENV


def _project_root() -> str:
    """
    Return the absolute path to the project root directory, inferred from the location of this module on disk.
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def _candidate_paths(primary: str, legacy: Optional[str] = None) -> List[str]:
    """
    Build an ordered list of file paths to try for a given name, including the
    original path, a project-root-relative variant, and an optional legacy
    filename, while removing duplicates.
    """
    candidates: List[str] = [primary]
    if not os.path.isabs(primary):
        candidates.append(os.path.join(_project_root(), primary))
    if legacy:
        candidates.append(legacy)
        if not os.path.isabs(legacy):
            candidates.append(os.path.join(_project_root(), legacy))
    # remove duplicates, keep order
    seen = set()
    uniq: List[str] = []
    for p in candidates:
        if p not in seen:
            uniq.append(p)
            seen.add(p)
    return uniq


def _read_key_file(path: str, legacy: Optional[str] = None) -> Optional[List[str]]:
    """
    Return the non-empty lines of the first key file found among the
    candidate locations, or None when none exists or all are empty.
    """
    for p in _candidate_paths(path, legacy):
        try:
            with open(p, "r", encoding="utf-8") as f:
                lines = [ln.strip() for ln in f.read().splitlines() if ln.strip()]
        except FileNotFoundError:
            continue
        if lines:
            return lines
    return None


def read_ncbi_api_key(path: str = DEFAULT_NCBI_KEY_FILE) -> Optional[str]:
    """
    Load the NCBI E-utilities API key from a key file in the usual locations,
    falling back to the NCBI_API_KEY environment variable. Returns None when
    neither is set.
    """
    lines = _read_key_file(path, legacy="NCBI.key")
    if lines:
        return lines[0]
    return os.environ.get(NCBI_API_KEY_ENV) or None


def safe_write_file(path: str, content: str, encoding: str = "utf-8", makedirs: bool = True) -> bool:
    """
    Safely write content to a file, optionally creating parent directories.
    """
    if makedirs:
        parent_dir = os.path.dirname(path)
        if parent_dir:
            try:
                os.makedirs(parent_dir, exist_ok=True)
            except OSError:
                return False

    try:
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(content)
        return True
    except OSError:
        return False
