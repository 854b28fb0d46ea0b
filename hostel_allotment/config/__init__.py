"""
Configuration package for the hostel allotment service.

Environment settings are loaded once and cached; import ``settings`` for the
process-wide instance or call ``get_settings()`` to build it lazily.
"""

from hostel_allotment.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
