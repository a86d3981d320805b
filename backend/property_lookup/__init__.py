"""
Property lookup service: cached street-address lookups against RentCast.
"""

__version__ = "1.0.0"
