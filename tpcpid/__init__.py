"""
TPC particle identification for light-flavour analyses.
"""

__version__ = "0.1.0"
