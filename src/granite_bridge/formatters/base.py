"""Formatter protocol, registry and shared rendering rules.

A QueryResult with no columns is a status-only result (DDL, DML, legacy
status lines): every formatter renders it as its message alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from granite_bridge.core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from granite_bridge.core.models import QueryResult


@runtime_checkable
class Formatter(Protocol):
    def format(self, result: QueryResult) -> Iterator[str]:
        """Transform a QueryResult into formatted output lines."""
        ...


def is_status_only(result: QueryResult) -> bool:
    return not result.columns


def status_lines(result: QueryResult, fallback: str | None = None) -> Iterator[str]:
    """Lines for a status-only result: its message, else fallback, else nothing."""
    text = result.message or fallback
    if text:
        yield text


class FormatterRegistry:
    """Formatter classes keyed by output format name."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str) -> Callable[[type[Formatter]], type[Formatter]]:
        """Class decorator registering a formatter under name."""

        def decorator(formatter_class: type[Formatter]) -> type[Formatter]:
            self._formatters[str(name)] = formatter_class
            return formatter_class

        return decorator

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Instantiate the formatter for name (a str or str enum member).

        Raises ValidationError if no formatter is registered under name.
        """
        key = str(name)
        if key not in self._formatters:
            available = ", ".join(self.available)
            msg = f"Unknown output format {key!r}. Available: {available}"
            raise ValidationError(msg)
        return self._formatters[key](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


registry = FormatterRegistry()
