"""JSON Lines file sink for exporting ledger records."""

import json
import logging
from pathlib import Path
from typing import Any

from emi_ledger.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Append records to one ``.jsonl`` file per entity type.

    Appending keeps every batch, so repeated event flushes build a complete
    audit trail instead of overwriting it.
    """

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write files into.
        pretty : bool
            Write a pretty-printed ``.json`` snapshot per batch instead of
            appending JSON Lines.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def path_for(self, entity_type: str) -> Path:
        # Topic names like medloan.ledger-events become file-safe names
        stem = entity_type.replace(".", "_")
        return self.output_dir / (f"{stem}.json" if self.pretty else f"{stem}.jsonl")

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records for an entity type."""
        file_path = self.path_for(entity_type)
        data = [to_dict(record) for record in records]

        if self.pretty:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        else:
            with open(file_path, "a", encoding="utf-8") as f:
                for item in data:
                    f.write(json.dumps(item, ensure_ascii=False, default=str) + "\n")

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)
        logger.debug("Wrote %d %s records to %s", len(records), entity_type, file_path)

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")
