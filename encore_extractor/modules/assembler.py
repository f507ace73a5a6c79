"""Gathers the encore build artifacts from an extracted layer into the output layout.

Output layout::

    encore_prod/
        artifacts/build/          <- .encore/build
        artifacts/manifest.json   <- .encore/manifest.json
        runtimes/                 <- encore/runtimes
        build-info.json
        infra.config.json
        meta/

where ``.encore`` is ``<parent of encore>/workspace/apps/encore/.encore``.
Every step is independent: a missing source is recorded and skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from common import AssemblyReport, ensure_dir

from .config import COMPONENT_FILES, ENCORE_CONFIG_RELATIVE_PATH, ENCORE_DIR_NAME
from .exceptions import CopyError, wrap_exception
from .utils import copy_file, copy_tree

logger = logging.getLogger("encore_extractor.assembler")


def find_encore_dirs(layer_root: Path) -> List[Path]:
    """
    Locate the ``encore`` directory inside an extracted layer.

    The layer root is checked first; otherwise every directory named
    ``encore`` below it is returned in sorted order.
    """
    direct = layer_root / ENCORE_DIR_NAME
    if direct.is_dir():
        return [direct]

    logger.debug("'%s' directory not found at layer root; searching recursively...", ENCORE_DIR_NAME)
    return sorted(path for path in layer_root.rglob(ENCORE_DIR_NAME) if path.is_dir())


def _copy_config_artifacts(encore_dir: Path, output_dir: Path, report: AssemblyReport) -> None:
    config_dir = encore_dir.parent / ENCORE_CONFIG_RELATIVE_PATH
    if not config_dir.is_dir():
        logger.warning("Warning: .encore directory not found in expected location: %s", config_dir)
        report.missing.append(".encore")
        return

    try:
        artifacts_dir = ensure_dir(output_dir / "artifacts")
    except OSError as e:
        raise wrap_exception(CopyError, f"Unable to create {output_dir / 'artifacts'}", e)

    build_dir = config_dir / "build"
    if build_dir.is_dir():
        target_build = artifacts_dir / "build"
        report.copy_reports.append(copy_tree(build_dir, target_build))
        report.copied.append("artifacts/build")
        logger.debug("Copied build to %s", target_build)
    else:
        logger.warning("Warning: build directory not found")
        report.missing.append("build")

    manifest_file = config_dir / "manifest.json"
    if manifest_file.is_file():
        target_manifest = artifacts_dir / "manifest.json"
        copy_file(manifest_file, target_manifest)
        report.copied.append("artifacts/manifest.json")
        logger.debug("Copied manifest.json to %s", target_manifest)
    else:
        logger.warning("Warning: manifest.json not found")
        report.missing.append("manifest.json")


def copy_encore_components(encore_dir: Path, output_dir: Path) -> AssemblyReport:
    """
    Copy the known encore artifacts from ``encore_dir`` into ``output_dir``.

    Args:
        encore_dir: The ``encore`` directory found in the extracted layer
        output_dir: Final output directory

    Returns:
        What was copied, what was missing and the per-tree copy reports

    Raises:
        CopyError: If a copy fails structurally
    """
    report = AssemblyReport()
    if not encore_dir.is_dir():
        logger.warning("encore directory not found in extracted layer: %s", encore_dir)
        report.missing.append(ENCORE_DIR_NAME)
        return report

    logger.debug("Found encore at: %s", encore_dir)
    _copy_config_artifacts(encore_dir, output_dir, report)

    runtimes_dir = encore_dir / "runtimes"
    if runtimes_dir.is_dir():
        target_runtimes = output_dir / "runtimes"
        report.copy_reports.append(copy_tree(runtimes_dir, target_runtimes))
        report.copied.append("runtimes")
        logger.debug("Copied runtimes to %s", target_runtimes)
    else:
        logger.warning("Warning: runtimes directory not found in encore")
        report.missing.append("runtimes")

    for name in COMPONENT_FILES:
        source = encore_dir / name
        target = output_dir / name
        if source.is_dir():
            report.copy_reports.append(copy_tree(source, target))
        elif source.exists():
            copy_file(source, target)
        else:
            logger.warning("Warning: %s not found", name)
            report.missing.append(name)
            continue
        report.copied.append(name)
        logger.debug("Copied %s to %s", name, target)

    return report
