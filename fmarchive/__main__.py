"""Allow running the CLI with ``python -m fmarchive``."""

from .cli import main

if __name__ == "__main__":
    main()
