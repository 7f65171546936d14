"""Allow ``python -m cctracker``."""

from cctracker.cli import main

if __name__ == "__main__":
    main()
