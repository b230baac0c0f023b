"""
models/ - Domain Layer
======================
Plain value records (subscriptions, services, tickets) and billing enums.
No dependencies on other layers.
"""
