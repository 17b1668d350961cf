"""Allow running the service with ``python -m zeedzad``."""

import sys

from zeedzad.cli import main

sys.exit(main())
