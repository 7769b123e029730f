"""Allow ``python -m shellmate``."""

from shellmate.cli.app import run

if __name__ == "__main__":
    run()
