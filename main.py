#!/usr/bin/env python3
"""
OCRSub Entry Point Script

This script initializes the CLI handler and runs the subtitle extraction process.
"""

import sys
from ocrsub.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 10):
        sys.stderr.write("OCRSub requires Python 3.10 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
