"""Configuration and constants module for the encore artifact extractor."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_IMAGE_TAG = "my_image:latest"

# 현재 작업 디렉토리 기준 고정 이름
ARCHIVE_NAME = "encoredocker.tar"
WORKSPACE_DIR_NAME = "docker_extract_temp"
OUTPUT_DIR_NAME = "encore_prod"
STALE_OUTPUT_DIRS = ("extracted_output",)

# 이미지 tar 내부 구조
MANIFEST_NAME = "manifest.json"
LAYER_BLOB_DIR = ("blobs", "sha256")

# 레이어 내부 encore 디렉토리 구조
ENCORE_DIR_NAME = "encore"
ENCORE_CONFIG_RELATIVE_PATH = "workspace/apps/encore/.encore"
COMPONENT_FILES = ("build-info.json", "infra.config.json", "meta")

# 메시지 상수
MESSAGES = {
    "build_start": "Building Docker image {tag}...",
    "save_complete": "Saved Docker image successfully.",
    "remove_complete": "Docker images removed successfully.",
    "output_created": "Created output directory: {path}",
    "cleanup_start": "Cleaning up temporary files...",
    "archive_remove": "Removing tar file...",
    "all_complete": "Process completed! Files extracted to: {path}",
    "error_occurred": "Error: {error}",
    "unexpected_error": "Unexpected error: {error}",
}

# 에러 메시지 상수
ERROR_MESSAGES = {
    "manifest_unreadable": "Unable to read image manifest: {path}",
    "manifest_invalid_json": "Image manifest is not valid JSON",
    "manifest_not_array": "Image manifest must be a JSON array",
    "manifest_empty": "Image manifest contains no entries",
    "manifest_entry_invalid": "First image manifest entry must be a JSON object",
    "no_layer_sources": "No layer sources found",
    "source_not_found": "Source not found: {path}",
    "workspace_failed": "Unable to prepare workspace: {path}",
    "cleanup_failed": "Unable to remove {path}",
}


@dataclass(frozen=True)
class ExtractorConfig:
    """Runtime settings threaded through every pipeline step."""

    debug: bool = False
    encore_executable: str = "encore"
    docker_executable: str = "docker"
    tar_executable: str = "tar"
    base_images: Tuple[str, ...] = ("node:slim",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExtractorConfig":
        """
        Build a configuration from environment variables.

        When ``environ`` is omitted, a ``.env`` file in the working directory
        is loaded first and ``os.environ`` is used.

        Args:
            environ: Explicit variable mapping (skips the ``.env`` lookup)

        Returns:
            The resulting configuration
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        return cls(
            debug=environ.get("DEBUG") == "1",
            encore_executable=environ.get("ENCORE_BIN") or cls.encore_executable,
            docker_executable=environ.get("DOCKER_BIN") or cls.docker_executable,
            tar_executable=environ.get("TAR_BIN") or cls.tar_executable,
        )

    @property
    def log_level(self) -> int:
        # 디버그가 아니면 진단/경고 로그는 출력하지 않는다
        return logging.DEBUG if self.debug else logging.ERROR
