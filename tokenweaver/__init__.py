"""
TokenWeaver - Design token ingestion and multi-format design system export.
"""

from .__version__ import __version__, __version_info__

__all__ = ['__version__', '__version_info__']
