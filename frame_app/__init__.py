"""Frame Analyzer member-property handoff.

The frame analyzer (primary window) opens the steel section selector with the
member context in the URL; the selector publishes the chosen section
properties back through a shared key-value slot.
"""
from __future__ import annotations

__version__ = "0.1.0"
