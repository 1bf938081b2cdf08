"""
Main entry point for running the package as a module.

Usage:
    python -m thumbnail_api key --url https://example.org/image.jpg
    python -m thumbnail_api upload --id 0123456789abcdef logo.png --local-root /tmp/thumbs
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
