"""
External service clients for the property lookup service.
"""
