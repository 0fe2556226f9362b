import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

from imagelens.config import LOG_LEVEL
from imagelens.pipeline import process_upload, process_upload_with_resize

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="imagelens",
        description="Extract metadata from an image and analyze it with a hosted vision model.",
    )
    parser.add_argument("image", type=Path, help="Path to the image file")
    parser.add_argument("-c", "--context", default=None, help="Optional context for the analysis")
    parser.add_argument(
        "--resize",
        action="store_true",
        help="Downscale and retry when the image is too large for analysis",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """Process one file and print the result as JSON.

    Returns:
        Process exit code (1 when analysis failed)
    """
    data = args.image.read_bytes()
    mime_type = mimetypes.guess_type(args.image.name)[0] or "application/octet-stream"

    handler = process_upload_with_resize if args.resize else process_upload
    result = await handler(data, args.image.name, mime_type, args.context)

    print(result.model_dump_json(indent=2, by_alias=True))
    return 1 if result.error else 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the imagelens command."""
    args = parse_args(argv)
    if not args.image.is_file():
        logger.error(f"No such file: {args.image}")
        return 2
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
