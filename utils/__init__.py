"""
utils/ - Shared Helpers
=======================
Logging setup, calendar arithmetic and text formatting.
"""
