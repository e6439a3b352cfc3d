"""Entry point for running stockbt as a module.

This allows the CLI to be invoked with ``python -m stockbt``.
"""

from .cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
