"""
Entry point for ``python -m trifecta``.
"""
from trifecta.cli import run

if __name__ == "__main__":
    run()
