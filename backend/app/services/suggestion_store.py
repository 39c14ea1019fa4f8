"""
Storage collaborators for the suggestion engine.

The application service depends only on two shapes:
- FileStore: locate a project file by path, read its content, write new content.
- SuggestionStore: suggestion records keyed by id, filterable by project + status.

Two implementations of each are provided:
- In-memory stores, for tests and for callers that embed the engine.
- JSON-on-disk stores rooted under the workspace directory.

Stores are explicitly constructed and injected; nothing here is module-level state.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..models.suggestion import Suggestion, SuggestionStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class StoreRecordNotFound(LookupError):
    """Raised when a store is asked to read or update a record it does not hold."""
    pass


class FileStore(Protocol):
    def find_file_id(self, project_id: str, path: str) -> Optional[str]:
        ...

    def get_file(self, file_id: str) -> str:
        ...

    def update_file(self, file_id: str, content: str) -> None:
        ...


class SuggestionStore(Protocol):
    def get(self, suggestion_id: str) -> Optional[Suggestion]:
        ...

    def insert(self, suggestion: Suggestion) -> Suggestion:
        ...

    def update(self, suggestion_id: str, **fields: Any) -> Suggestion:
        ...

    def query(
        self,
        project_id: str,
        status: Optional[SuggestionStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Suggestion]:
        ...


def paginate(items: List[Suggestion], limit: Optional[int], offset: Optional[int]) -> List[Suggestion]:
    """
    Newest-first pagination.

    An offset without a limit uses a page of DEFAULT_PAGE_SIZE records.
    """
    ordered = sorted(items, key=lambda s: s.created_at, reverse=True)
    if offset is not None:
        size = limit if limit is not None else DEFAULT_PAGE_SIZE
        return ordered[offset:offset + size]
    if limit is not None:
        return ordered[:limit]
    return ordered


def _apply_fields(suggestion: Suggestion, fields: Dict[str, Any]) -> Suggestion:
    fields = dict(fields)
    fields.setdefault("updated_at", datetime.now())
    return suggestion.model_copy(update=fields)


# ============================================================================
# In-memory stores
# ============================================================================

class InMemoryFileStore:
    """Project files held in a dict; file ids are `project_id:path`."""

    def __init__(self):
        self._files: Dict[str, str] = {}
        self._paths: Dict[str, str] = {}

    @staticmethod
    def make_file_id(project_id: str, path: str) -> str:
        return f"{project_id}:{path}"

    def add_file(self, project_id: str, path: str, content: str) -> str:
        file_id = self.make_file_id(project_id, path)
        self._files[file_id] = content
        self._paths[file_id] = path
        return file_id

    def find_file_id(self, project_id: str, path: str) -> Optional[str]:
        file_id = self.make_file_id(project_id, path)
        return file_id if file_id in self._files else None

    def get_file(self, file_id: str) -> str:
        if file_id not in self._files:
            raise StoreRecordNotFound(f"File {file_id} not found")
        return self._files[file_id]

    def update_file(self, file_id: str, content: str) -> None:
        if file_id not in self._files:
            raise StoreRecordNotFound(f"File {file_id} not found")
        self._files[file_id] = content


class InMemorySuggestionStore:
    """Suggestion records held in a dict keyed by id."""

    def __init__(self):
        self._records: Dict[str, Suggestion] = {}

    def get(self, suggestion_id: str) -> Optional[Suggestion]:
        return self._records.get(suggestion_id)

    def insert(self, suggestion: Suggestion) -> Suggestion:
        self._records[suggestion.id] = suggestion
        return suggestion

    def update(self, suggestion_id: str, **fields: Any) -> Suggestion:
        current = self._records.get(suggestion_id)
        if current is None:
            raise StoreRecordNotFound(f"Suggestion {suggestion_id} not found")
        updated = _apply_fields(current, fields)
        self._records[suggestion_id] = updated
        return updated

    def query(
        self,
        project_id: str,
        status: Optional[SuggestionStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Suggestion]:
        matches = [
            s for s in self._records.values()
            if s.project_id == project_id and (status is None or s.status == status)
        ]
        return paginate(matches, limit, offset)


# ============================================================================
# JSON-on-disk stores
# ============================================================================

class JsonFileStore:
    """
    Project files stored as plain text under the workspace.

    Storage layout:
        {workspace_root}/files/{project_id}/{path}
    """

    def __init__(self, workspace_dir: str):
        self.root = Path(workspace_dir) / "files"
        self.root.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        logger.info(f"📁 JsonFileStore initialized at {self.root.resolve()}")

    @staticmethod
    def make_file_id(project_id: str, path: str) -> str:
        return f"{project_id}:{path}"

    def _resolve(self, file_id: str) -> Path:
        project_id, _, path = file_id.partition(":")
        project_dir = (self.root / project_id).resolve()
        target = (project_dir / path.lstrip("/")).resolve()
        # Reject paths that escape the project directory
        if project_dir not in target.parents:
            raise StoreRecordNotFound(f"File {file_id} not found")
        return target

    def add_file(self, project_id: str, path: str, content: str) -> str:
        file_id = self.make_file_id(project_id, path)
        target = self._resolve(file_id)
        target.parent.mkdir(parents=True, exist_ok=True)
        with self._write_lock:
            target.write_text(content, encoding="utf-8")
        return file_id

    def find_file_id(self, project_id: str, path: str) -> Optional[str]:
        file_id = self.make_file_id(project_id, path)
        try:
            return file_id if self._resolve(file_id).is_file() else None
        except StoreRecordNotFound:
            return None

    def get_file(self, file_id: str) -> str:
        target = self._resolve(file_id)
        if not target.is_file():
            raise StoreRecordNotFound(f"File {file_id} not found")
        return target.read_text(encoding="utf-8")

    def update_file(self, file_id: str, content: str) -> None:
        target = self._resolve(file_id)
        if not target.is_file():
            raise StoreRecordNotFound(f"File {file_id} not found")
        with self._write_lock:
            target.write_text(content, encoding="utf-8")


class JsonSuggestionStore:
    """
    Suggestion records stored as one JSON document each.

    Storage layout:
        {workspace_root}/suggestions/{suggestion_id}.json
    """

    def __init__(self, workspace_dir: str):
        self.root = Path(workspace_dir) / "suggestions"
        self.root.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        logger.info(f"📁 JsonSuggestionStore initialized at {self.root.resolve()}")

    def _path(self, suggestion_id: str) -> Path:
        return self.root / f"{Path(suggestion_id).name}.json"

    def _write(self, suggestion: Suggestion) -> None:
        with self._write_lock:
            self._path(suggestion.id).write_text(suggestion.model_dump_json(indent=2), encoding="utf-8")

    def get(self, suggestion_id: str) -> Optional[Suggestion]:
        path = self._path(suggestion_id)
        if not path.is_file():
            return None
        return Suggestion.model_validate_json(path.read_text(encoding="utf-8"))

    def insert(self, suggestion: Suggestion) -> Suggestion:
        self._write(suggestion)
        return suggestion

    def update(self, suggestion_id: str, **fields: Any) -> Suggestion:
        current = self.get(suggestion_id)
        if current is None:
            raise StoreRecordNotFound(f"Suggestion {suggestion_id} not found")
        updated = _apply_fields(current, fields)
        self._write(updated)
        return updated

    def query(
        self,
        project_id: str,
        status: Optional[SuggestionStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Suggestion]:
        matches: List[Suggestion] = []
        for path in self.root.glob("*.json"):
            try:
                suggestion = Suggestion.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable suggestion record {path.name}: {e}")
                continue
            if suggestion.project_id != project_id:
                continue
            if status is not None and suggestion.status != status:
                continue
            matches.append(suggestion)
        return paginate(matches, limit, offset)
