from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from filesize.config_loader import ENV_LIMIT_PREFIX
from filesize.size_parser import validate_size

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "FILESIZE_"
SIZE_ENV_KEYS = frozenset({"FILESIZE_LOG_MAX_BYTES"})


def is_size_key(key: str) -> bool:
    """Keys whose values must be valid size strings."""
    return key in SIZE_ENV_KEYS or (key.startswith(ENV_LIMIT_PREFIX) and len(key) > len(ENV_LIMIT_PREFIX))


def _split_assignment(line: str) -> Optional[Tuple[str, str]]:
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    text = text.removeprefix("export ").lstrip()
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def read_env_file(path: Path) -> Dict[str, str]:
    """
    Collect FILESIZE_* assignments from a .env file.

    Other keys are ignored. Size-valued keys (FILESIZE_LIMIT_<NAME>,
    FILESIZE_LOG_MAX_BYTES) whose value does not parse are dropped with a
    warning; the raw string is kept for the ones that do.
    """
    entries: Dict[str, str] = {}
    for lineno, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        assignment = _split_assignment(raw_line)
        if assignment is None:
            continue
        key, value = assignment
        if not key.startswith(ENV_PREFIX):
            LOGGER.debug("Skipping foreign env key path=%s line=%s key=%s", path, lineno, key, extra={"category": "CONFIG"})
            continue
        if is_size_key(key):
            error = validate_size(value)
            if error is not None:
                LOGGER.warning(
                    "Rejected env size path=%s line=%s key=%s error=%s",
                    path,
                    lineno,
                    key,
                    error,
                    extra={"category": "ERRORS"},
                )
                continue
        entries[key] = value
    return entries


def load_env_file(path: Path, override: bool = False) -> int:
    """Export the accepted FILESIZE_* entries of path into os.environ; return how many were set."""
    if not path.exists():
        LOGGER.debug("Env file not found path=%s", path, extra={"category": "CONFIG"})
        return 0
    entries = read_env_file(path)
    applied = [key for key in entries if override or key not in os.environ]
    for key in applied:
        os.environ[key] = entries[key]
    LOGGER.info("Loaded env file path=%s keys=%s", path, sorted(applied), extra={"category": "CONFIG"})
    return len(applied)
