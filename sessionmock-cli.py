#!/usr/bin/env python3
"""
SessionMock CLI

Convenience wrapper around the package CLI for running from a checkout.
The actual implementation is in src/sessionmock/cli.py

Usage:
    python sessionmock-cli.py validate mocks.yaml
    python sessionmock-cli.py resolve mocks.yaml https://api.example.com/users --repeat 2
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from sessionmock.cli import main

if __name__ == '__main__':
    sys.exit(main())
