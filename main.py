"""Entry point: ``python main.py run`` is the same as the ``restcheck run`` console script."""
import sys

from restcheck.cli import main

if __name__ == "__main__":
    sys.exit(main())
