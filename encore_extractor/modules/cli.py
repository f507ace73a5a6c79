"""Command-line interface module for the encore artifact extractor."""

import argparse
import sys
from typing import Optional

from common import setup_logging

from .config import DEFAULT_IMAGE_TAG, MESSAGES, ExtractorConfig
from .exceptions import ExtractionError
from .extractor import extract_encore_artifacts


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Build an encore docker image and extract its build artifacts into ./encore_prod.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  # build my_image:latest and extract its artifacts
  python -m encore_extractor.main

  # use another tag, with verbose diagnostics
  DEBUG=1 python -m encore_extractor.main --image api:staging
        """
    )

    parser.add_argument(
        "--image",
        default=DEFAULT_IMAGE_TAG,
        help=f"Tag of the image to build and export (default: {DEFAULT_IMAGE_TAG})"
    )

    return parser


def run_cli(argv: Optional[list] = None) -> int:
    """
    Run the CLI application.

    Args:
        argv: Command-line arguments (for testing purposes)

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = ExtractorConfig.from_env()
    setup_logging(level=config.log_level, stream_target=sys.stdout)

    try:
        output_dir = extract_encore_artifacts(args.image, config=config)

    except ExtractionError as e:
        print(MESSAGES["error_occurred"].format(error=str(e)), file=sys.stderr)
        return 1

    except Exception as e:
        print(MESSAGES["unexpected_error"].format(error=str(e)), file=sys.stderr)
        return 1

    print(MESSAGES["all_complete"].format(path=output_dir))
    return 0
