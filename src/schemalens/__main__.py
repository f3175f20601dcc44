"""Allow running schemalens as ``python -m schemalens``."""

from schemalens.cli import main

if __name__ == "__main__":
    main()
