from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from gashub.config import get_config
from gashub.errors import OrderStoreError

from .memory_backend import InMemoryOrderStore


def resolve_data_dir(data_dir: str | Path = None) -> Path:
    """Resolve `data_dir` (default: config.data_dir) against the repository root."""
    if data_dir is None:
        data_dir = get_config().data_dir

    path = Path(data_dir)
    if path.is_absolute():
        return path

    # Look up the directory tree for the project's pyproject.toml
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent / path
    return current / path


def _is_missing(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


class JsonlOrderStore(InMemoryOrderStore):
    """
    JSON-lines backed store.
    - Loads `<data_dir>/<collection>.jsonl` once at construction.
    - Rewrites the whole file after every write, so the file is always the
      latest snapshot; a failed write leaves memory and file unchanged.
    """

    def __init__(self, data_dir: str | Path = None, collection: Optional[str] = None) -> None:
        collection = collection or get_config().orders_collection
        self.data_dir = resolve_data_dir(data_dir)
        self.path = self.data_dir / f"{collection}.jsonl"
        super().__init__(collection=collection, records=self._load_records(self.path))
        self.logger.info(f"Loaded {len(self._records)} orders from {self.path}")

    @staticmethod
    def _load_records(path: Path) -> List[Dict[str, Any]]:
        if not path.exists() or path.stat().st_size == 0:
            return []

        try:
            frame = pd.read_json(path, lines=True, orient="records", dtype=False, convert_dates=False)
        except ValueError as e:
            raise OrderStoreError(
                f"Error reading orders from {path}: {e}\n"
                f"Please check that the file holds one JSON object per line."
            ) from e

        # Keys missing from a line come back as NaN; drop them again
        return [
            {key: value for key, value in record.items() if not _is_missing(value)}
            for record in frame.to_dict(orient="records")
        ]

    def _persist(self) -> None:
        frame = pd.DataFrame(list(self._records.values()))
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            frame.to_json(self.path, orient="records", lines=True, force_ascii=False)
        except OSError as e:
            raise OrderStoreError(f"Error writing orders to {self.path}: {e}") from e
