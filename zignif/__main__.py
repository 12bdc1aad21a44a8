"""
CLI entrypoint for `python -m zignif`.
"""

from .zignifc import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
