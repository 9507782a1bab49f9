"""
NES 6502 interpreter package.
"""
__version__ = "0.1.0"
