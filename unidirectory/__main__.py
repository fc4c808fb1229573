"""
Package entry point.

Allows running the application via:

    python -m unidirectory

This simply forwards execution to unidirectory.cli.main().
"""

from unidirectory.cli import main

if __name__ == "__main__":
    main()
