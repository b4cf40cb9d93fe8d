"""
Entry point for running the govm CLI as a module.

Usage: python -m govm [command] [options]
"""

from govm.cli.parser import main

if __name__ == "__main__":
    main()
