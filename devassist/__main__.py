"""
Main entry point for the DevAssist CLI.
"""

from devassist.cli import cli


def main() -> None:
    """Main function for the DevAssist CLI."""
    cli()


if __name__ == "__main__":
    main()
