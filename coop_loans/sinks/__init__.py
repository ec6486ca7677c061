"""Output sinks for exporting reports."""

from coop_loans.sinks.console import ConsoleSink
from coop_loans.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
