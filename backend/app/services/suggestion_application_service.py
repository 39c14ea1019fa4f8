"""
Suggestion application service.

The only component allowed to mutate file content or suggestion status. It
owns the lifecycle:

    pending -> applied | edited   (apply_suggestion)
    pending -> rejected           (reject_suggestion)
    applied | edited -> undone    (undo_suggestion)

Concurrency guard: before writing, the service checks that the suggestion's
anchor text (`original_code`) is still present verbatim in the current file.
If it is not, apply returns a conflict and performs no mutation. There is no
version counter or lock; the check runs immediately before the write.

Write ordering: the file is written first, then the suggestion record. If the
record write fails, the previous file content is written back before the
error propagates.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..models.suggestion import (
    ApplicationResult,
    ConflictInfo,
    Suggestion,
    SuggestionStatus,
    can_transition,
)
from .replacement import ReplaceFirstOccurrence, ReplacementStrategy
from .suggestion_store import FileStore, StoreRecordNotFound, SuggestionStore

logger = logging.getLogger(__name__)


class SuggestionError(Exception):
    """Base class for hard failures of a lifecycle operation."""
    pass


class SuggestionNotFoundError(SuggestionError):
    """The suggestion id does not exist."""
    pass


class InvalidSuggestionStateError(SuggestionError):
    """The requested transition is not legal from the suggestion's current status."""

    def __init__(self, suggestion_id: str, status: SuggestionStatus, action: str):
        self.suggestion_id = suggestion_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} suggestion {suggestion_id} with status: {status.value}")


class SuggestionFileNotFoundError(SuggestionError):
    """The suggestion's target file cannot be resolved in the file store."""
    pass


class SuggestionConflictError(SuggestionError):
    """Undo could not locate the applied code in the current file content."""

    def __init__(self, message: str, current_content: str):
        self.current_content = current_content
        super().__init__(message)


class SuggestionApplicationService:
    """Apply, reject and undo suggestions against a file store."""

    def __init__(
        self,
        suggestion_store: SuggestionStore,
        file_store: FileStore,
        replacer: Optional[ReplacementStrategy] = None,
    ):
        self.suggestions = suggestion_store
        self.files = file_store
        self.replacer = replacer or ReplaceFirstOccurrence()

    # ===== Read operations =====

    def get_suggestion(self, suggestion_id: str) -> Optional[Suggestion]:
        return self.suggestions.get(suggestion_id)

    def list_suggestions(
        self,
        project_id: str,
        status: Optional[SuggestionStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Suggestion]:
        """List a project's suggestions newest-first, optionally filtered by status."""
        return self.suggestions.query(project_id, status=status, limit=limit, offset=offset)

    def persist_drafts(self, drafts: Iterable[Suggestion]) -> List[Suggestion]:
        """Store builder drafts; every draft must still be pending."""
        stored = []
        for draft in drafts:
            if draft.status != SuggestionStatus.PENDING:
                raise InvalidSuggestionStateError(draft.id, draft.status, "persist")
            stored.append(self.suggestions.insert(draft))
        if stored:
            logger.info(f"💾 Persisted {len(stored)} pending suggestion(s)")
        return stored

    # ===== Lifecycle transitions =====

    def apply_suggestion(self, suggestion_id: str, edited_code: Optional[str] = None) -> ApplicationResult:
        """
        Apply a suggestion to its target file.

        Args:
            suggestion_id: The ID of the suggestion to apply
            edited_code: Optional user-edited code to apply instead of suggested_code

        Returns:
            ApplicationResult; on conflict `success` is False, `conflict` is set
            and nothing was written.

        Raises:
            SuggestionNotFoundError, InvalidSuggestionStateError, SuggestionFileNotFoundError
        """
        suggestion = self._require(suggestion_id)
        new_status = SuggestionStatus.EDITED if edited_code is not None else SuggestionStatus.APPLIED
        if not can_transition(suggestion.status, new_status):
            raise InvalidSuggestionStateError(suggestion_id, suggestion.status, "apply")

        file_id, file_path = self._resolve_target_file(suggestion)
        current_content = self._read_file(file_id, file_path)
        code_to_apply = edited_code if edited_code is not None else suggestion.suggested_code

        updated_content = self.replacer.replace(current_content, suggestion.original_code, code_to_apply)
        if updated_content is None:
            logger.warning(f"⚠️ Conflict applying suggestion {suggestion_id}: original code no longer in {file_path}")
            return ApplicationResult(
                success=False,
                suggestion=suggestion,
                conflict=ConflictInfo(current_content=current_content, suggested_content=code_to_apply),
            )

        self.files.update_file(file_id, updated_content)
        updated = self._update_or_restore(
            suggestion_id,
            file_id,
            current_content,
            status=new_status,
            applied_at=datetime.now(),
            applied_code=code_to_apply,
        )

        logger.info(f"✅ Suggestion {suggestion_id} {new_status.value} to {file_path}")
        return ApplicationResult(success=True, suggestion=updated)

    def reject_suggestion(self, suggestion_id: str) -> Suggestion:
        """Reject a pending suggestion. No file content is touched."""
        suggestion = self._require(suggestion_id)
        if not can_transition(suggestion.status, SuggestionStatus.REJECTED):
            raise InvalidSuggestionStateError(suggestion_id, suggestion.status, "reject")

        updated = self.suggestions.update(
            suggestion_id,
            status=SuggestionStatus.REJECTED,
            rejected_at=datetime.now(),
        )
        logger.info(f"🚫 Suggestion {suggestion_id} rejected")
        return updated

    def undo_suggestion(self, suggestion_id: str) -> Suggestion:
        """
        Revert an applied or edited suggestion.

        The applied text (or suggested_code when no applied text was recorded)
        is replaced by original_code. applied_at/applied_code are kept as history.

        Raises:
            SuggestionNotFoundError, InvalidSuggestionStateError,
            SuggestionFileNotFoundError, SuggestionConflictError
        """
        suggestion = self._require(suggestion_id)
        if not can_transition(suggestion.status, SuggestionStatus.UNDONE):
            raise InvalidSuggestionStateError(suggestion_id, suggestion.status, "undo")

        file_id, file_path = self._resolve_target_file(suggestion)
        current_content = self._read_file(file_id, file_path)
        code_to_replace = (
            suggestion.applied_code if suggestion.applied_code is not None else suggestion.suggested_code
        )

        # An empty applied text cannot be located, so it is treated like a missing one
        restored_content = None
        if code_to_replace:
            restored_content = self.replacer.replace(current_content, code_to_replace, suggestion.original_code)
        if restored_content is None:
            logger.warning(f"⚠️ Conflict undoing suggestion {suggestion_id}: applied code no longer in {file_path}")
            raise SuggestionConflictError(
                f"Applied code for suggestion {suggestion_id} is no longer present in {file_path}",
                current_content=current_content,
            )

        self.files.update_file(file_id, restored_content)
        updated = self._update_or_restore(
            suggestion_id,
            file_id,
            current_content,
            status=SuggestionStatus.UNDONE,
        )

        logger.info(f"↩️ Suggestion {suggestion_id} undone in {file_path}")
        return updated

    # ===== Helpers =====

    def _require(self, suggestion_id: str) -> Suggestion:
        suggestion = self.suggestions.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(f"Suggestion {suggestion_id} not found")
        return suggestion

    def _resolve_target_file(self, suggestion: Suggestion) -> Tuple[str, str]:
        """Resolve file_paths[0]; multi-file suggestions only mutate their first path."""
        if not suggestion.file_paths:
            raise SuggestionFileNotFoundError("Suggestion has no file paths")

        file_path = suggestion.file_paths[0]
        if len(suggestion.file_paths) > 1:
            logger.warning(
                f"Suggestion {suggestion.id} lists {len(suggestion.file_paths)} files; "
                f"only {file_path} is modified"
            )

        file_id = self.files.find_file_id(suggestion.project_id, file_path)
        if file_id is None:
            raise SuggestionFileNotFoundError(f"File not found: {file_path}")
        return file_id, file_path

    def _read_file(self, file_id: str, file_path: str) -> str:
        try:
            return self.files.get_file(file_id) or ""
        except StoreRecordNotFound as e:
            raise SuggestionFileNotFoundError(f"File not found: {file_path}") from e

    def _update_or_restore(self, suggestion_id: str, file_id: str, previous_content: str, **fields) -> Suggestion:
        """Write the suggestion record; on failure put the previous file content back."""
        try:
            return self.suggestions.update(suggestion_id, **fields)
        except Exception:
            logger.error(f"❌ Failed to update suggestion {suggestion_id}; restoring file {file_id}")
            self.files.update_file(file_id, previous_content)
            raise
