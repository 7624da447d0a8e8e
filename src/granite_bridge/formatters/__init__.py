"""Output formatters for granite-bridge."""

from granite_bridge.formatters.base import Formatter, FormatterRegistry, registry
from granite_bridge.formatters.csv import CSVFormatter
from granite_bridge.formatters.json import JSONFormatter
from granite_bridge.formatters.table import TableFormatter
