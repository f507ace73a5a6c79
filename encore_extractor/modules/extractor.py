"""
encore 이미지 아티팩트 추출 핵심 로직 모듈

이미지 빌드부터 가장 큰 레이어 추출, 아티팩트 복사, 정리까지의
파이프라인을 순차적으로 실행합니다.
"""

from __future__ import annotations

import enum
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from common import AssemblyReport, ensure_dir, remove_path

from . import archive, container
from .assembler import copy_encore_components, find_encore_dirs
from .config import (
    ARCHIVE_NAME,
    ERROR_MESSAGES,
    LAYER_BLOB_DIR,
    MANIFEST_NAME,
    MESSAGES,
    OUTPUT_DIR_NAME,
    STALE_OUTPUT_DIRS,
    WORKSPACE_DIR_NAME,
    ExtractorConfig,
)
from .exceptions import WorkspaceError, wrap_exception
from .manifest import find_largest_layer, read_manifest, strip_digest_prefix

logger = logging.getLogger("encore_extractor.pipeline")


class PipelineState(enum.Enum):
    """Linear states of one extraction run."""

    CLEAN = "clean"
    BUILT = "built"
    SAVED = "saved"
    REMOVED = "removed"
    EXTRACTED = "extracted"
    LAYER_SELECTED = "layer_selected"
    LAYER_EXTRACTED = "layer_extracted"
    ASSEMBLED = "assembled"
    CLEANED_UP = "cleaned_up"


class ImageExtractor:
    """
    encore 이미지 추출 핸들러 클래스

    Builds the image, exports it, extracts its largest layer and gathers
    the build artifacts into the output directory.
    """

    def __init__(self, image_tag: str, base_dir: Path, config: ExtractorConfig):
        """
        Initialize the ImageExtractor.

        Args:
            image_tag: Tag of the image to build and export
            base_dir: Directory holding the archive, workspace and output
            config: Extractor configuration
        """
        self.image_tag = image_tag
        # tar는 작업 디렉토리를 바꿔 실행되므로 절대 경로로 고정
        self.base_dir = base_dir.resolve()
        self.config = config
        self.tar_path = self.base_dir / ARCHIVE_NAME  # docker save 결과 tar 파일
        self.workspace = self.base_dir / WORKSPACE_DIR_NAME  # 임시 작업 디렉토리 루트
        self.output_dir = self.base_dir / OUTPUT_DIR_NAME  # 최종 산출물 디렉토리
        self.state = PipelineState.CLEAN
        self.history: List[PipelineState] = [PipelineState.CLEAN]
        self.report: Optional[AssemblyReport] = None

    def _advance(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Pipeline state -> %s", state.name)

    def _make_temp_dir(self, prefix: str) -> Path:
        """Create a fresh temporary directory inside the workspace."""
        try:
            ensure_dir(self.workspace)
            temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=self.workspace))
        except OSError as e:
            raise wrap_exception(
                WorkspaceError,
                ERROR_MESSAGES["workspace_failed"].format(path=self.workspace),
                e,
            )
        logger.debug("Temporary directory created: %s", temp_dir)
        return temp_dir

    def remove_stale_outputs(self) -> None:
        """Remove output directories left behind by older runs."""
        for name in STALE_OUTPUT_DIRS:
            stale = self.base_dir / name
            if not stale.exists():
                continue
            logger.debug("Removing old %s directory...", name)
            try:
                remove_path(stale)
            except OSError as e:
                raise wrap_exception(
                    WorkspaceError, ERROR_MESSAGES["cleanup_failed"].format(path=stale), e
                )

    def select_layer(self, work_dir: Path) -> Path:
        """
        Read the extracted manifest and return the path of the largest layer blob.

        Args:
            work_dir: Directory the image archive was extracted into

        Returns:
            Path to the layer blob under ``blobs/sha256``
        """
        entry = find_largest_layer(read_manifest(work_dir / MANIFEST_NAME))
        logger.debug("Selected largest layer (%d bytes): %s", entry.size, entry.digest)
        return work_dir.joinpath(*LAYER_BLOB_DIR, strip_digest_prefix(entry.digest))

    def assemble(self, layer_dir: Path) -> AssemblyReport:
        """
        Copy the encore components of the extracted layer into the output directory.

        Args:
            layer_dir: Directory the layer blob was extracted into
        """
        try:
            ensure_dir(self.output_dir)
        except OSError as e:
            raise wrap_exception(
                WorkspaceError,
                ERROR_MESSAGES["workspace_failed"].format(path=self.output_dir),
                e,
            )
        print(MESSAGES["output_created"].format(path=self.output_dir))

        report = AssemblyReport()
        encore_dirs = find_encore_dirs(layer_dir)
        if not encore_dirs:
            logger.warning("Could not locate any 'encore' directory in the extracted layer.")
            report.missing.append("encore")
            return report

        for encore_dir in encore_dirs:
            report.merge(copy_encore_components(encore_dir, self.output_dir))
        return report

    def cleanup(self) -> None:
        """
        임시 작업 디렉토리와 tar 파일을 정리합니다.
        """
        print(MESSAGES["cleanup_start"])
        try:
            remove_path(self.workspace)
            if self.tar_path.exists():
                print(MESSAGES["archive_remove"])
                remove_path(self.tar_path)
        except OSError as e:
            raise wrap_exception(
                WorkspaceError, ERROR_MESSAGES["cleanup_failed"].format(path=self.workspace), e
            )

    def run(self) -> Path:
        """
        Execute the whole pipeline.

        Any failing step aborts the run and its exception propagates. The
        workspace and the archive are removed once the image has been built,
        on success as well as on failure.

        Returns:
            Path of the output directory
        """
        logger.debug("Current working directory: %s", self.base_dir)
        self.remove_stale_outputs()

        # 1. encore로 이미지 빌드
        container.build_image(self.image_tag, self.config)
        self._advance(PipelineState.BUILT)

        try:
            # 2. 이미지를 tar로 저장하고 로컬 이미지 삭제
            container.save_image(self.image_tag, self.tar_path, self.config)
            self._advance(PipelineState.SAVED)
            container.remove_images(self.image_tag, self.config)
            self._advance(PipelineState.REMOVED)

            # 3. tar 추출
            work_dir = self._make_temp_dir("work_")
            archive.extract_archive(self.tar_path, work_dir, self.config)
            self._advance(PipelineState.EXTRACTED)

            # 4. manifest에서 가장 큰 레이어 선택
            layer_path = self.select_layer(work_dir)
            self._advance(PipelineState.LAYER_SELECTED)

            # 5. 레이어 추출
            layer_dir = self._make_temp_dir("layer_")
            archive.extract_layer(layer_path, layer_dir, self.config)
            self._advance(PipelineState.LAYER_EXTRACTED)

            # 6. 아티팩트 복사
            self.report = self.assemble(layer_dir)
            self._advance(PipelineState.ASSEMBLED)

        except BaseException:
            # 실패 시에도 정리하되, 원래 예외를 그대로 전달
            try:
                self.cleanup()
            except WorkspaceError as cleanup_error:
                logger.error("Cleanup after failed run also failed: %s", cleanup_error)
            raise

        self.cleanup()
        self._advance(PipelineState.CLEANED_UP)
        return self.output_dir


def extract_encore_artifacts(
    image_tag: str,
    base_dir: Optional[Path] = None,
    config: Optional[ExtractorConfig] = None,
) -> Path:
    """
    Build ``image_tag`` and extract its encore artifacts into ``encore_prod``.

    Args:
        image_tag: Tag of the image to build
        base_dir: Working directory for the archive, workspace and output (default: cwd)
        config: Extractor configuration (default: read from the environment)

    Returns:
        Path of the output directory

    Raises:
        ExtractionError: If any pipeline step fails
    """
    extractor = ImageExtractor(
        image_tag,
        base_dir if base_dir is not None else Path.cwd(),
        config if config is not None else ExtractorConfig.from_env(),
    )
    return extractor.run()
