"""Minh Phát storefront API: catalog, page content, newsletter and admin sessions."""

__version__ = "1.0.0"
