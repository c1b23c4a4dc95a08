"""
sharded overlap join of sequencing reads against reference bases and called variants
"""
__version__ = '0.1.0'
