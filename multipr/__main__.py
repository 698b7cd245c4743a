"""Allow ``python -m multipr``."""

from multipr.cli import cli

if __name__ == "__main__":
    cli()
