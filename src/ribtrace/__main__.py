"""Allow ``python -m src.ribtrace``."""

import sys

from src.ribtrace.cli import main

if __name__ == "__main__":
    sys.exit(main())
