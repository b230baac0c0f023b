"""
repositories/ - Data Access Layer
==================================
Each repository stores one domain entity and returns domain model objects.
Services depend on these lookups and writes, never on how they are stored.
"""
