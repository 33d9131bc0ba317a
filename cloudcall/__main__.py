"""Main entry point when executing cloudcall as a package.

This allows running the package using python -m cloudcall.
"""

from cloudcall.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
