"""Headless-browser scrapers for business sites, YC, Product Hunt and formularies."""

__version__ = "0.1"
