"""Allow running the CLI with ``python -m machine_tools.cli``."""

import sys

from machine_tools.cli import main

sys.exit(main())
