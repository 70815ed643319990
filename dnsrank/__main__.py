"""
Entry point for running dnsrank as a module.

Usage: python -m dnsrank [OPTIONS] COMMAND [ARGS]...
"""

from .cli import main

if __name__ == "__main__":
    main()
