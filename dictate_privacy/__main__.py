"""Entry point for ``python -m dictate_privacy``."""

import sys

from dictate_privacy.cli import main

if __name__ == "__main__":
    sys.exit(main())
