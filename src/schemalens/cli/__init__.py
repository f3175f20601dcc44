"""schemalens CLI - Command line interface for schemalens."""

from schemalens.cli.commands import cli


def main() -> None:
    """Main entry point for the schemalens CLI."""
    cli()


__all__ = ["main", "cli"]
