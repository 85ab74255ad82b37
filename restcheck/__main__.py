import sys

from restcheck.cli import main

sys.exit(main())
