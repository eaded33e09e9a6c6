"""Output sinks for ledger records and events."""

from emi_ledger.sinks.console import ConsoleSink
from emi_ledger.sinks.json_file import JsonFileSink
from emi_ledger.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
