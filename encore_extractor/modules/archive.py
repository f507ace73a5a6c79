"""tar extraction wrappers for image archives and layer blobs."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import ExtractorConfig
from .exceptions import ExternalCommandError
from .runner import run_command

logger = logging.getLogger("encore_extractor.archive")


def extract_archive(archive_path: Path, dest_dir: Path, config: ExtractorConfig) -> None:
    """Extract the saved image archive into ``dest_dir``."""
    logger.debug("Extracting %s into %s", archive_path, dest_dir)
    run_command(config.tar_executable, ["xf", str(archive_path)], work_dir=dest_dir)


def extract_layer(layer_path: Path, dest_dir: Path, config: ExtractorConfig) -> None:
    """
    Extract a layer blob into ``dest_dir``.

    Layers are tried as gzip-compressed tarballs first, then as plain ones.

    Raises:
        ExternalCommandError: If both extraction attempts fail
    """
    logger.debug("Extracting layer from: %s", layer_path)
    try:
        run_command(config.tar_executable, ["xzvf", str(layer_path)], work_dir=dest_dir)
    except ExternalCommandError as e:
        logger.debug("Gzip extraction failed, trying regular extraction... (%s)", e.stderr.strip())
        run_command(config.tar_executable, ["xvf", str(layer_path)], work_dir=dest_dir)
