"""Shared CLI plumbing for command modules.

Client creation, format-option handling, and output helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from granite_bridge.cli.output import get_formatter, write_output
from granite_bridge.core.client import GraniteClient
from granite_bridge.core.config import load_config, resolve_config

if TYPE_CHECKING:
    import typer

    from granite_bridge.core.config import ResolvedConfig
    from granite_bridge.core.models import QueryResult


def get_config(ctx: typer.Context) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))
    return resolve_config(
        config, format=obj.get("format"), timeout=obj.get("timeout")
    )


def get_client(ctx: typer.Context) -> GraniteClient:
    resolved = get_config(ctx)
    return GraniteClient(timeout=resolved.query_timeout)


def format_options(ctx: typer.Context) -> dict[str, Any]:
    """Formatter options; an unset --format falls back to config, then TTY."""
    obj = ctx.ensure_object(dict)
    format_flag = obj.get("format")
    if format_flag is None:
        resolved = get_config(ctx)
        if resolved.sources.get("default_format") != "default":
            format_flag = resolved.default_format
    return {
        "format_flag": format_flag,
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_result(ctx: typer.Context, result: QueryResult) -> None:
    opts = format_options(ctx)
    formatter = get_formatter(**opts)
    write_output(formatter, result)
