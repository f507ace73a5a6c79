"""encore artifact extractor modules."""

from .cli import run_cli
from .extractor import extract_encore_artifacts, ImageExtractor, PipelineState
from .manifest import select_largest_layer
from .utils import copy_tree

__all__ = [
    'run_cli',
    'extract_encore_artifacts',
    'ImageExtractor',
    'PipelineState',
    'select_largest_layer',
    'copy_tree',
]
