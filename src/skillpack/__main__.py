"""
skillpack package entry point - supports `python -m skillpack`
"""

from skillpack.main import app

if __name__ == "__main__":
    app()
