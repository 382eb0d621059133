"""Command line entry point for the SCSS language server."""

from pygls.cli import start_server

from feuille.server import server


def main() -> None:
    """Start the SCSS language server."""
    start_server(server)


if __name__ == "__main__":
    main()
