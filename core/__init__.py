"""Shared building blocks: logging helpers, once-only init, atomic file IO.

Everything in here is IO-light and free of verification/network concerns.
"""
