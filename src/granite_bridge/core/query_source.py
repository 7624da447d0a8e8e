"""SQL source resolution for the command line.

Resolves the SQL text from one of three sources:
1. Inline (-e flag): highest priority
2. File path: middle priority
3. stdin: lowest priority
"""

from __future__ import annotations

import sys
from pathlib import Path

from granite_bridge.core.exceptions import NotFoundError, ValidationError


def resolve_query_source(
    inline: str | None,
    file_path: str | None,
) -> str:
    """Resolve SQL from inline, file, or stdin.

    Precedence: inline > file > stdin.
    """
    if inline is not None:
        return inline

    if file_path is not None:
        p = Path(file_path)
        if not p.exists():
            msg = (
                f"SQL file not found: {file_path}\n"
                "Use -e for inline SQL or pipe it via stdin."
            )
            raise NotFoundError(msg)
        return p.read_text()

    if not sys.stdin.isatty():
        return sys.stdin.read()

    msg = "No SQL provided. Use -e, a file path, or pipe to stdin."
    raise ValidationError(msg)
