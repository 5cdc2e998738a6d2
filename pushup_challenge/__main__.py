"""Entry point for ``python -m pushup_challenge``."""
import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
