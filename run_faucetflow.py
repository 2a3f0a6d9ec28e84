#!/usr/bin/env python3
"""
Faucet Flow quick launcher.

Usage:
    python run_faucetflow.py [options]

Run ``python run_faucetflow.py --help`` for full options.
"""

from faucetflow.app import main

if __name__ == "__main__":
    main()
