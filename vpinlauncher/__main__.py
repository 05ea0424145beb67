"""Allow ``python -m vpinlauncher``."""

import sys

from vpinlauncher.cli import main

sys.exit(main())
