"""
Entry point for running gvmkit CLI as a module.

Usage: python -m gvmkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
