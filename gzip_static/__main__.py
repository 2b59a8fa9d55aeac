"""Module entrypoint for ``python -m gzip_static``.

This keeps module-mode execution behavior identical to the console script.
All argument parsing and run setup happen in ``gzip_static.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
