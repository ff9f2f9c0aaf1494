"""Entry point for ``python -m talentradar``."""
from .cli import cli

if __name__ == "__main__":
    cli()
