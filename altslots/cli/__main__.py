"""Module wrapper so running ``python -m altslots.cli`` matches the console script."""

from altslots.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
