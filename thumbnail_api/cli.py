"""
Command Line Interface for the thumbnail service.

Computes storage keys and uploads images to a storage without going through
the HTTP API.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import urllib3

from .errors import ThumbnailError
from .ids import ImageSize, hash_url, storage_key
from .local_client import LocalClient, LocalConfig
from .s3_client import S3Client
from .s3_config import S3Config
from .storages import UploadImageStorage


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('thumbnail_api')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration of the named storage from environment and CLI overrides."""
    config = S3Config.from_env(args.storage)

    if args.s3_endpoint:
        config.endpoint = args.s3_endpoint
    if args.s3_bucket:
        config.bucket = args.s3_bucket
    if args.s3_region:
        config.region = args.s3_region
    if args.s3_access_key:
        config.access_key = args.s3_access_key
    if args.s3_secret_key:
        config.secret_key = args.s3_secret_key

    return config


def get_storage_client(args: argparse.Namespace, logger: logging.Logger):
    """
    Get the object store client based on arguments: the local filesystem
    when --local-root is given, S3 otherwise.

    Raises:
        ValueError: if the configuration is invalid
    """
    if args.local_root:
        config = LocalConfig(name=args.storage, root_path=args.local_root, prefix=args.local_prefix)
        client_class = LocalClient
    else:
        config = get_s3_config(args)
        client_class = S3Client

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError(f"Configuration of storage {args.storage} is invalid")
    return client_class(config, logger)


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage configuration arguments to a parser."""
    parser.add_argument('--storage', default='uploads',
                        help='Storage name, used to read <NAME>_S3_* environment variables (default: uploads)')

    local_group = parser.add_argument_group('Local Storage')
    local_group.add_argument('--local-root', metavar='PATH',
                             help='Use local filesystem instead of S3')
    local_group.add_argument('--local-prefix', default='thumbnails',
                             help='Prefix within local root (default: thumbnails)')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override <NAME>_S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override <NAME>_S3_BUCKET')
    s3_group.add_argument('--s3-region', help='Override <NAME>_S3_REGION')
    s3_group.add_argument('--s3-access-key', help='Override <NAME>_S3_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override <NAME>_S3_SECRET')


def cmd_key(args: argparse.Namespace) -> int:
    """Print the storage keys for a url or id."""
    try:
        id = hash_url(args.url) if args.url else args.id
    except ThumbnailError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    widths = [args.size] if args.size else [size.width for size in ImageSize]
    for width in widths:
        print(storage_key(id, width))
    return 0


def cmd_upload(args: argparse.Namespace) -> int:
    """Generate and store the thumbnails of an image file."""
    logger = setup_logging(args.verbose)
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    path = Path(args.file)
    if not path.is_file():
        logger.error(f"File not found: {path}")
        return 1

    try:
        client = get_storage_client(args, logger)
    except ValueError:
        return 1

    storage = UploadImageStorage(args.storage, client, quality=args.quality, logger=logger)
    try:
        storage.process(args.id, path.read_bytes())
    except ThumbnailError as e:
        logger.error(f"Upload failed: {e.message}")
        return 1

    for size in ImageSize:
        logger.info(f"Stored {storage_key(args.id, size)} in {storage.name}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='thumbnail_api',
        description='Tools for the thumbnail service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m thumbnail_api key --url https://example.org/image.jpg
  python -m thumbnail_api key --id 7463a193a468a1ff1a0c0f7d5933e54b --size 200
  python -m thumbnail_api upload --id 0123456789abcdef logo.png --local-root /tmp/thumbs
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    key_parser = subparsers.add_parser('key', help='Print the storage keys of a thumbnail')
    key_source = key_parser.add_mutually_exclusive_group(required=True)
    key_source.add_argument('--url', help='Url of the original resource')
    key_source.add_argument('--id', help='Thumbnail id (MD5 hash of the original url)')
    key_parser.add_argument('-s', '--size', type=int, choices=[size.width for size in ImageSize],
                            help='Only print the key for this width')

    upload_parser = subparsers.add_parser('upload', help='Generate and store thumbnails for an image')
    upload_parser.add_argument('--id', required=True, help='Id to store the thumbnails under')
    upload_parser.add_argument('file', help='Image file')
    upload_parser.add_argument('-q', '--quality', type=int, default=80, help='WebP quality (default: 80)')
    upload_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(upload_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'key':
        return cmd_key(parsed_args)
    elif parsed_args.command == 'upload':
        return cmd_upload(parsed_args)

    return 1
