"""Tests for the branch-truncating revision history."""

from __future__ import annotations

import pydantic
import pytest

from fv_studio.history import RevisionHistory
from fv_studio.models import Dimensions, ImagePayload, RevisionEntry


@pytest.fixture
def make_entry(structured_strategy):
    """Factory for revision entries with a recognizable artifact."""

    def _make(sequence: int) -> RevisionEntry:
        return RevisionEntry(
            artifact=ImagePayload(data=f"rev-{sequence}".encode()),
            dimensions=Dimensions(width=1200, height=900),
            strategy=structured_strategy,
            sequence=sequence,
        )

    return _make


@pytest.fixture
def history_of(make_entry):
    """Build a history holding ``n`` entries with the cursor on the last."""

    def _build(n: int) -> RevisionHistory:
        history = RevisionHistory()
        for i in range(n):
            history = history.append(make_entry(i))
        return history

    return _build


class TestAppend:
    """Tests for RevisionHistory.append."""

    @pytest.mark.unit
    def test_empty_history(self) -> None:
        """Test a new history has no entries and cursor -1."""
        history = RevisionHistory()

        assert len(history) == 0
        assert history.cursor == -1
        assert history.current is None
        assert history.current_artifact is None

    @pytest.mark.unit
    def test_append_moves_cursor_to_new_entry(self, history_of) -> None:
        """Test appending at the end grows the list and follows with the cursor."""
        history = history_of(3)

        assert len(history) == 3
        assert history.cursor == 2
        assert history.current_artifact == ImagePayload(data=b"rev-2")
        assert history.next_sequence == 3

    @pytest.mark.unit
    def test_append_returns_new_value(self, history_of, make_entry) -> None:
        """Test append leaves the original history untouched."""
        history = history_of(1)

        updated = history.append(make_entry(1))

        assert len(history) == 1
        assert len(updated) == 2

    @pytest.mark.unit
    @pytest.mark.parametrize(("length", "k"), [(2, 0), (4, 1), (5, 3), (3, 0)])
    def test_append_after_navigate_truncates(self, history_of, make_entry, length, k) -> None:
        """Test appending after navigate(k) discards entries after k."""
        history = history_of(length).navigate(k)

        updated = history.append(make_entry(99))

        assert len(updated) == k + 2
        assert updated.cursor == k + 1
        assert updated.entries[: k + 1] == history.entries[: k + 1]
        assert updated.current.sequence == 99

    @pytest.mark.unit
    def test_sequence_keeps_counting_after_truncation(self, history_of, make_entry) -> None:
        """Test next_sequence never goes backwards when a branch is dropped."""
        history = history_of(3).navigate(0)

        updated = history.append(make_entry(history.next_sequence))

        assert [e.sequence for e in updated.entries] == [0, 3]
        assert updated.next_sequence == 4


class TestNavigate:
    """Tests for RevisionHistory.navigate."""

    @pytest.mark.unit
    def test_navigate_in_range(self, history_of) -> None:
        """Test navigating moves the cursor and the current artifact."""
        history = history_of(3)

        moved = history.navigate(0)

        assert moved.cursor == 0
        assert moved.current_artifact == ImagePayload(data=b"rev-0")
        assert moved.entries == history.entries

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [-1, -5, 3, 10])
    def test_navigate_out_of_range_is_noop(self, history_of, index: int) -> None:
        """Test out-of-range navigation keeps cursor and artifact."""
        history = history_of(3).navigate(1)

        moved = history.navigate(index)

        assert moved.cursor == 1
        assert moved.current_artifact == history.current_artifact
        assert moved.entries == history.entries

    @pytest.mark.unit
    def test_navigate_on_empty_history(self) -> None:
        """Test navigating an empty history changes nothing."""
        history = RevisionHistory()

        assert history.navigate(0).cursor == -1


class TestValidation:
    """Tests for RevisionHistory construction checks."""

    @pytest.mark.unit
    def test_cursor_out_of_range_rejected(self, make_entry) -> None:
        """Test a cursor beyond the entries is invalid."""
        with pytest.raises(pydantic.ValidationError):
            RevisionHistory(entries=(make_entry(0),), cursor=1)

    @pytest.mark.unit
    def test_empty_history_requires_cursor_minus_one(self) -> None:
        """Test an empty history cannot point at an entry."""
        with pytest.raises(pydantic.ValidationError):
            RevisionHistory(cursor=0)
