"""
Movies API Application Package.

This package contains the movie catalogue service: persistence, the listing
and rating engines, box-office enrichment, and the REST API.
"""

__version__ = "1.0.0"
