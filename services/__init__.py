"""
services/ - Business Logic Layer
================================
Pure billing calculators (payment dates, service periods, proportional
tickets) and the services that run them against the repositories.
"""
