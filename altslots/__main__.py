"""
Module entry-point that makes the package runnable with

    python -m altslots

The behaviour is identical to the *altslots-cli* console script.
"""

from altslots.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
