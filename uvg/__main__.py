# File: uvg/__main__.py
"""
uvg - Module entry point.

Allows running the generator directly via::

    python -m uvg schema.yaml --generator tables

This module simply delegates to the CLI entry point defined in ``uvg.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from uvg.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
