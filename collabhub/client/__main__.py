"""
Entry point for the collaboration hub client.
"""
from .cli import app


def main():
    """Launch the interactive command line client."""
    app()


if __name__ == "__main__":
    main()
