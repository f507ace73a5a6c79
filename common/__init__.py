"""Common utilities shared across the encore extractor."""

from .file_utils import ensure_dir, remove_path
from .logging_utils import setup_logging
from .models import AssemblyReport, CopyFailure, CopyReport, LayerEntry

__all__ = [
    "ensure_dir",
    "remove_path",
    "setup_logging",
    "AssemblyReport",
    "CopyFailure",
    "CopyReport",
    "LayerEntry",
]
