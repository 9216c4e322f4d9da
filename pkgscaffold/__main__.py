"""Allow ``python -m pkgscaffold``."""

import sys

from pkgscaffold.cli import main

sys.exit(main())
