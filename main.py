#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

Drop QR code images or .txt grid drawings into ``grids/`` and run:

    python main.py batch

Or use the full CLI:

    python -m brick_layout.cli batch --help
    python -m brick_layout.cli single my_qr.png --baseplate 48 48
"""

from brick_layout.cli import app

if __name__ == "__main__":
    app()
