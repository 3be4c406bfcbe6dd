"""Module entrypoint for ``python -m dirmirror``.

All argument parsing and runtime setup happen in ``dirmirror.cli``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
