"""Go source formatting via ``gofmt``."""

from __future__ import annotations

import shutil
import subprocess
import sys

GOFMT: str = "gofmt"


def format_source(source: str) -> str:
    """Return ``source`` formatted by ``gofmt``.

    If ``gofmt`` is not installed or rejects the input, the unformatted
    source is returned and a warning is printed.
    """
    executable = shutil.which(GOFMT)
    if executable is None:
        print(f"Warning: {GOFMT} not found, writing unformatted source", file=sys.stderr)
        return source

    try:
        result = subprocess.run(
            [executable],
            input=source,
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        print(f"Warning: {GOFMT} failed: {e.stderr.strip()}", file=sys.stderr)
        return source

    return result.stdout
