"""
Storefront Backend

Supplier feed reconciliation and checkout for the kids shop catalog.
"""

__version__ = "1.0.0"
