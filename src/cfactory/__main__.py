"""Allow ``python -m cfactory``."""

from .cli import main

if __name__ == "__main__":
    main()
