"""JSON file sink for exporting reports to files."""

import json
import logging
from pathlib import Path
from typing import Any

from bank_ledger.exceptions import SinkError
from bank_ledger.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output each report to its own JSON file."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.

        Raises
        ------
        SinkError
            If the output directory cannot be created.
        """
        self.output_dir = Path(output_dir)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot create output directory {self.output_dir}: {e}") from e
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, report_name: str, records: list[Any]) -> None:
        """Write the rows of one report to ``<report_name>.json``."""
        file_path = self.output_dir / f"{report_name}.json"

        data = [to_dict(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
        except OSError as e:
            raise SinkError(f"Cannot write {file_path}: {e}") from e

        self._counts[report_name] = len(records)

    def close(self) -> None:
        """Log a summary of the written files."""
        logger.info("JSON reports written to: %s", self.output_dir)
        for report_name, count in self._counts.items():
            logger.info("  %s: %d records", report_name, count)
