"""
Entry point for ``python -m gu``.
"""

from gu.cli import main

if __name__ == '__main__':
    main()
