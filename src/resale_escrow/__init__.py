"""Peer-to-peer ticket resale marketplace settled through per-transaction escrow."""

__version__ = "0.1.0"
