"""
Handlers package.

Every module exposes `register(dp)`; bot.py calls them in HANDLER_MODULES order.
"""

from . import start

__all__ = ["start"]
