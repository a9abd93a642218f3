"""
Entry point for running gvmkit as a module.

Usage: python -m gvmkit [command] [options]
"""

from gvmkit.cli.parser import main

if __name__ == "__main__":
    main()
