"""Content processors for partially managed files.

A processor isolates the managed part of a file from the part the
repository owns. The file-sync engine applies ``extract_comparable``
to both the default-branch and the PR-branch copy, so the same rules
decide whether a PR is needed and whether an open PR is stale.
"""

from typing import Protocol

GITIGNORE_MARKER = "# Repository-specific entries (preserved during sync)"


class ContentProcessor(Protocol):
    """Pair of pure functions governing comparison and merge of a managed file."""

    def comparable_source(self, source: str) -> str:
        """Form of the source content that is compared."""
        ...

    def extract_comparable(self, existing: str) -> str:
        """Managed portion of the existing content."""
        ...

    def merge_final(self, source: str, existing: str | None) -> str:
        """Content to commit, given the source and the existing file (if any)."""
        ...


def _marker_offset(text: str, marker: str) -> int | None:
    """Offset of the first line equal to ``marker`` (ignoring surrounding whitespace)."""
    offset = 0
    for line in text.splitlines(keepends=True):
        if line.strip() == marker:
            return offset
        offset += len(line)
    return None


class MarkerSectionProcessor:
    """
    Manage everything above a marker line; preserve the marker and what follows.

    The merged file is the synced portion, one blank line, then the
    preserved section verbatim, ending with exactly one newline. A
    repository without its own section receives the source's section.
    """

    def __init__(self, marker: str = GITIGNORE_MARKER) -> None:
        self.marker = marker

    def comparable_source(self, source: str) -> str:
        return self.extract_comparable(source)

    def extract_comparable(self, existing: str) -> str:
        offset = _marker_offset(existing, self.marker)
        if offset is None:
            return existing
        return existing[:offset]

    def preserved_section(self, existing: str | None) -> str | None:
        if not existing:
            return None
        offset = _marker_offset(existing, self.marker)
        if offset is None:
            return None
        return existing[offset:].rstrip("\n")

    def merge_final(self, source: str, existing: str | None) -> str:
        synced = self.extract_comparable(source).strip()
        preserved = self.preserved_section(existing) or self.preserved_section(source)
        if preserved is None:
            return synced + "\n"
        if not synced:
            return preserved + "\n"
        return f"{synced}\n\n{preserved}\n"


class GitignoreProcessor(MarkerSectionProcessor):
    """``.gitignore`` with a preserved repository-specific section."""

    def __init__(self) -> None:
        super().__init__(GITIGNORE_MARKER)
