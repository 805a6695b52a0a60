# shellmend/__main__.py
"""
Entry point for shellmend.
"""
from shellmend.cli import app

if __name__ == "__main__":
    app()
