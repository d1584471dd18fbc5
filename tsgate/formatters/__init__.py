"""Output formatters for tsgate reports."""

from tsgate.formatters.json import format_as_json
from tsgate.formatters.sarif import format_as_sarif

__all__ = ["format_as_json", "format_as_sarif"]
