"""
Entry point for running spk as a module: python -m spk
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
