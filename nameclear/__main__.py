#!/usr/bin/env python3
"""Entry point for ``python -m nameclear``."""

import sys

from nameclear.cli import main

if __name__ == '__main__':
    sys.exit(main())
