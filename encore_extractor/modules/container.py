"""
encore / docker 명령 래퍼 모듈

이미지 빌드, tar 저장, 이미지 삭제를 외부 CLI로 수행합니다.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import MESSAGES, ExtractorConfig
from .runner import locate_executable, run_command

logger = logging.getLogger("encore_extractor.container")


def build_image(image_tag: str, config: ExtractorConfig) -> str:
    """
    Build the docker image using the ``encore`` executable.

    Args:
        image_tag: Tag to give the built image
        config: Extractor configuration

    Returns:
        Resolved path of the encore executable
    """
    print(MESSAGES["build_start"].format(tag=image_tag))

    # PATH에서 encore 실행 파일 위치 확인
    encore_path = locate_executable(config.encore_executable)
    logger.debug("Using encore at %s", encore_path)

    run_command(encore_path, ["build", "docker", image_tag])
    logger.debug("Docker image built successfully.")
    return encore_path


def save_image(image_tag: str, tar_path: Path, config: ExtractorConfig) -> None:
    """
    Save the docker image to a tar file.

    Args:
        image_tag: Image to save
        tar_path: Destination archive path
        config: Extractor configuration
    """
    logger.debug("Saving Docker image to %s...", tar_path)
    run_command(config.docker_executable, ["save", "-o", str(tar_path), image_tag])
    print(MESSAGES["save_complete"])


def remove_images(image_tag: str, config: ExtractorConfig) -> None:
    """
    Remove the built image together with the configured base images.

    Args:
        image_tag: Image built by :func:`build_image`
        config: Extractor configuration
    """
    images = [*config.base_images, image_tag]
    logger.debug("Removing Docker images %s", " and ".join(images))
    run_command(config.docker_executable, ["image", "rm", *images])
    print(MESSAGES["remove_complete"])
