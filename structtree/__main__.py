"""Module entrypoint for ``python -m structtree``.

This keeps module-mode execution behavior identical to the ``struct`` script.
"""

from .cli import main


if __name__ == "__main__":
    main()
