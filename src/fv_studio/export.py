"""Writing revisions to disk.

Filenames combine the session id with the revision's sequence number,
which is never reused within a session, so every exported revision gets
its own file.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fv_studio.utils.images import get_file_extension

if TYPE_CHECKING:
    from pathlib import Path

    from fv_studio.models import RevisionEntry

logger = logging.getLogger(__name__)


def revision_filename(session_id: str, entry: RevisionEntry, prefix: str = "fv") -> str:
    """Build the export filename for a revision.

    Example:
        >>> revision_filename("a1b2c3d4", entry)
        'fv_a1b2c3d4_rev003.png'
    """
    ext = get_file_extension(entry.artifact.mime_type)
    return f"{prefix}_{session_id}_rev{entry.sequence:03d}{ext}"


def export_revision(
    entry: RevisionEntry,
    output_dir: Path,
    session_id: str,
    prefix: str = "fv",
) -> Path:
    """Write a revision's artifact to ``output_dir``.

    Args:
        entry: Revision to export.
        output_dir: Target directory, created when missing.
        session_id: Identifier of the owning session.
        prefix: Filename prefix.

    Returns:
        Path of the written file.

    """
    output_path = output_dir / revision_filename(session_id, entry, prefix)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(entry.artifact.data)

    logger.info("Exported revision %d to %s", entry.sequence, output_path)
    return output_path
