# File: codeforge/__main__.py
"""
CodeForge - Module entry point.

    python -m codeforge generate all --model blog.yaml -o ./out

Delegates to :func:`codeforge.cli.cli_main`.
"""

from __future__ import annotations


def main() -> None:
    from codeforge.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
