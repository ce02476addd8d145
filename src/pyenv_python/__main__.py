from __future__ import annotations

import sys

from ._cli import python_main

if __name__ == "__main__":
    sys.exit(python_main())
