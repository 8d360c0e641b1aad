from __future__ import annotations

import contextlib
import gzip
import json
import sys
from pathlib import Path
from typing import Any, Iterator, TextIO


def ensure_outdir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


@contextlib.contextmanager
def open_text_input(path: str | Path) -> Iterator[TextIO]:
    """Open pileup-style text for reading.

    ``-`` is stdin (left open on exit); a ``.gz`` suffix is read through gzip.
    """
    p = str(path)
    if p == "-":
        yield sys.stdin
    elif p.endswith(".gz"):
        with gzip.open(p, "rt", encoding="utf-8") as fh:
            yield fh  # type: ignore[misc]
    else:
        with open(p, "rt", encoding="utf-8") as fh:
            yield fh


def write_json(path: str | Path, obj: Any) -> None:
    with open(path, "wt", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True)
        f.write("\n")
