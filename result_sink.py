"""
JSON artifacts for a zone comparison run.

One file per category (old records, new records, missing, mismatched), named
after the zone so runs against different zones do not overwrite each other.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from compare_errors import PersistError, RetrievalError
from record_diff import ResourceRecordSet


def artifact_label(kind: str, zone_name: str) -> str:
    """Build the artifact label for a category of one zone, e.g. ``example.com-missing``"""
    zone = zone_name.rstrip('.') or 'root'
    zone = zone.replace('/', '_').replace('\\', '_')
    return f"{zone}-{kind}"


class ResultSink:
    """Writes comparison artifacts as indented JSON files"""

    def __init__(self, output_dir: str = '.', logger: logging.Logger = None):
        self.output_dir = Path(output_dir)
        self.logger = logger or logging.getLogger('route53_zone_compare.sink')

    def persist(self, label: str, data: Any) -> Path:
        """Write ``data`` to ``<output_dir>/<label>.json``"""
        path = self.output_dir / f"{label}.json"
        try:
            content = json.dumps(data, indent=2, default=str)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        except (OSError, TypeError, ValueError) as e:
            raise PersistError(f"Failed to write {path}: {e}") from e

        self.logger.info(f"Saved {label} to {path}")
        return path


def load_records_json(file_path: str) -> List[ResourceRecordSet]:
    """Load a record collection previously written by ResultSink"""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise RetrievalError(f"Failed to read records from {file_path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise RetrievalError(f"Expected a JSON array of record sets in {file_path}")

    try:
        return [ResourceRecordSet.from_api(item) for item in data]
    except (AttributeError, TypeError) as e:
        raise RetrievalError(f"Malformed record set in {file_path}: {e}") from e
