# suture/store.py
"""Record stores the planner reads from and the apply loop writes back to.

A store exposes three operations:
  - read_rows()                  -> raw row dicts (arbitrary field values)
  - update_record(id, values)    -> set fields on one row
  - delete_records(ids)          -> remove a batch of rows (empty batch is a no-op)
Failures surface as StoreError.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .errors import StoreError
from .util.console import obs
from .util.timestamps import format_like


class RecordStore:
    id_field = "id"

    def read_rows(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def update_record(self, record_id: str, values: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_records(self, record_ids: Iterable[str]) -> None:
        raise NotImplementedError


class JsonTableStore(RecordStore):
    """A JSON file holding a list of row objects, or {"records": [...]}.

    Every mutation re-reads the file and rewrites it atomically, keeping the
    container shape (and any sibling keys of "records") intact.
    """

    def __init__(self, path: Union[str, Path], *, id_field: str = "id") -> None:
        self.path = Path(path)
        self.id_field = id_field

    def _load(self) -> tuple[Any, List[Dict[str, Any]]]:
        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as ex:
            raise StoreError(f"Missing record file: {self.path}") from ex
        except (OSError, ValueError) as ex:
            raise StoreError(f"Failed to load JSON: {self.path} ({ex})") from ex

        rows = obj.get("records") if isinstance(obj, dict) else obj
        if not isinstance(rows, list):
            raise StoreError(f"{self.path}: expected a JSON list of rows or an object with a 'records' list")
        return obj, rows

    def _save(self, container: Any, rows: List[Dict[str, Any]]) -> None:
        if isinstance(container, dict):
            container = dict(container)
            container["records"] = rows
        else:
            container = rows
        text = json.dumps(container, indent=2, ensure_ascii=False) + "\n"

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError as ex:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise StoreError(f"Failed to write {self.path}: {ex}") from ex

    def _row_id(self, row: Any) -> str | None:
        if not isinstance(row, dict) or row.get(self.id_field) is None:
            return None
        return str(row.get(self.id_field))

    def read_rows(self) -> List[Dict[str, Any]]:
        _container, rows = self._load()
        out = [r for r in rows if isinstance(r, dict)]
        obs("store", f"read path={self.path} rows={len(out)}")
        return out

    def update_record(self, record_id: str, values: Dict[str, Any]) -> None:
        container, rows = self._load()
        for i, row in enumerate(rows):
            if self._row_id(row) == str(record_id):
                row2 = dict(row)
                for k, v in values.items():
                    row2[k] = format_like(row.get(k), v)
                rows[i] = row2
                break
        else:
            raise StoreError(f"No record with {self.id_field}={record_id!r} in {self.path}")
        self._save(container, rows)

    def delete_records(self, record_ids: Iterable[str]) -> None:
        ids = {str(x) for x in record_ids}
        if not ids:
            return
        container, rows = self._load()
        present = {self._row_id(r) for r in rows}
        missing = sorted(ids - present)
        if missing:
            raise StoreError(f"No record with {self.id_field} in {missing!r} in {self.path}")
        kept = [r for r in rows if self._row_id(r) not in ids]
        self._save(container, kept)
        obs("store", f"delete path={self.path} rows={len(rows) - len(kept)}")
