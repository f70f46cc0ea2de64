"""
Compatibility entrypoint.

Prefer running `lrc-editor <command>` after installing the package.
"""

from lrc_editor.cli import main as cli_main


def cli() -> None:
    cli_main()


if __name__ == "__main__":
    cli()
