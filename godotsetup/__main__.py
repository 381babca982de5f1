"""
Entry point for running godotsetup as a module.

Usage: python -m godotsetup [command] [options]
"""

from godotsetup.cli.parser import main

if __name__ == "__main__":
    main()
