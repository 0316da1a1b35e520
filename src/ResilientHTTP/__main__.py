"""Allow ``python -m ResilientHTTP``."""

from ResilientHTTP.cli import app

if __name__ == "__main__":
    app()
