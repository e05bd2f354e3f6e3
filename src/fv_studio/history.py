"""Branch-truncating revision history.

A linear undo list: appending while the cursor points somewhere other than
the last entry discards everything after the cursor first. No tree of
branches is kept.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fv_studio.models import ImagePayload, RevisionEntry


class RevisionHistory(BaseModel):
    """Ordered revisions plus a navigation cursor.

    Instances are immutable; ``append`` and ``navigate`` return new
    histories.

    Attributes:
        entries: Revisions in creation order along the current branch
        cursor: Index of the revision being viewed, -1 when empty
        next_sequence: Sequence number the next revision will receive

    Example:
        >>> history = RevisionHistory()
        >>> history = history.append(entry)
        >>> history.cursor
        0
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[RevisionEntry, ...] = ()
    cursor: int = -1
    next_sequence: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_cursor(self) -> RevisionHistory:
        if not -1 <= self.cursor <= len(self.entries) - 1:
            msg = f"cursor {self.cursor} out of range for {len(self.entries)} entries"
            raise ValueError(msg)
        if not self.entries and self.cursor != -1:
            msg = "cursor must be -1 for an empty history"
            raise ValueError(msg)
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> RevisionEntry:
        return self.entries[index]

    @property
    def current(self) -> RevisionEntry | None:
        """Revision at the cursor, or None when the history is empty."""
        if self.cursor < 0:
            return None
        return self.entries[self.cursor]

    @property
    def current_artifact(self) -> ImagePayload | None:
        entry = self.current
        return entry.artifact if entry is not None else None

    @property
    def has_valid_cursor(self) -> bool:
        return 0 <= self.cursor < len(self.entries)

    def append(self, entry: RevisionEntry) -> RevisionHistory:
        """Append a revision, discarding every entry after the cursor first.

        Args:
            entry: The new revision.

        Returns:
            New history whose cursor points at ``entry``.
        """
        kept = self.entries[: self.cursor + 1]
        entries = (*kept, entry)
        return RevisionHistory(
            entries=entries,
            cursor=len(entries) - 1,
            next_sequence=max(self.next_sequence, entry.sequence + 1),
        )

    def navigate(self, index: int) -> RevisionHistory:
        """Move the cursor to ``index``.

        An index outside ``[0, len - 1]`` is ignored and the same history is
        returned unchanged.
        """
        if not 0 <= index < len(self.entries) or index == self.cursor:
            return self
        return self.model_copy(update={"cursor": index})
