from __future__ import annotations

import json
import os
import re
import tempfile
from typing import Any, Dict, Iterable, List, Optional, Tuple


RESULT_EXT = ".json"
_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def write_text_atomic(path: str, text: str) -> str:
    """Write text via a temp file in the same directory, then os.replace.

    Readers (the server, a concurrent build) never observe a half-written file.
    """
    directory = os.path.dirname(os.path.abspath(path))
    ensure_dir(directory)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=os.path.basename(path), dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return path


def write_json_atomic(path: str, data: Any, *, indent: Optional[int] = None) -> str:
    return write_text_atomic(path, json.dumps(data, ensure_ascii=False, indent=indent))


def result_path(results_dir: str, source_name: str) -> str:
    stem = _UNSAFE_NAME.sub("_", source_name).strip("._") or "source"
    return os.path.join(results_dir, f"{stem}{RESULT_EXT}")


def write_result(results_dir: str, source_name: str, records: Iterable[Dict]) -> str:
    """Overwrite the per-source result file with the latest records."""
    return write_json_atomic(result_path(results_dir, source_name), list(records))


def read_json_list(path: str) -> List[Any]:
    """Read a JSON array from disk. Raises OSError/ValueError on bad input."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array, got {type(data).__name__}")
    return data


def list_result_files(results_dir: str) -> List[Tuple[str, str]]:
    """Return (filename, path) for every result file, sorted by filename."""
    try:
        names = os.listdir(results_dir)
    except FileNotFoundError:
        return []
    out: List[Tuple[str, str]] = []
    for name in sorted(names):
        if not name.endswith(RESULT_EXT) or name.startswith("."):
            continue
        path = os.path.join(results_dir, name)
        if os.path.isfile(path):
            out.append((name, path))
    return out
