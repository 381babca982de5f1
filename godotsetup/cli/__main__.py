"""
Entry point for running the godotsetup CLI as a module.

Usage: python -m godotsetup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
