"""Entry point for ``python -m logsh``."""

from logsh.cli import app


def main() -> None:
    """Run the logsh CLI."""
    app()


if __name__ == "__main__":
    main()
