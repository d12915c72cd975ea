"""
Providers module - completion sources shipped with compline.
"""

from compline.providers.words import WordProvider

__all__ = ["WordProvider"]
