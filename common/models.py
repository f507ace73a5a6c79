"""Shared dataclass models for the encore extractor components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(slots=True)
class LayerEntry:
    """One ``LayerSources`` entry of an image manifest.

    ``size`` is ``None`` when the manifest does not declare a usable
    non-negative integer size for the layer.
    """

    digest: str
    size: Optional[int] = None


@dataclass(slots=True)
class CopyFailure:
    """A single file that could not be copied (soft failure)."""

    path: str
    reason: str


@dataclass(slots=True)
class CopyReport:
    """Outcome of one recursive directory copy."""

    source: Path
    destination: Path
    files_copied: int = 0
    directories_created: int = 0
    skipped: List[str] = field(default_factory=list)
    failures: List[CopyFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(slots=True)
class AssemblyReport:
    """Summary of the artifacts gathered into the output directory."""

    copied: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    copy_reports: List[CopyReport] = field(default_factory=list)

    @property
    def failures(self) -> List[CopyFailure]:
        return [failure for report in self.copy_reports for failure in report.failures]

    def merge(self, other: "AssemblyReport") -> None:
        """Fold ``other`` into this report (used when several encore dirs are found)."""
        self.copied.extend(other.copied)
        self.missing.extend(other.missing)
        self.copy_reports.extend(other.copy_reports)
