"""
Smart Library: lending and recommendation core.

Catalogs books, periodicals and theses, runs the checkout / return /
overdue lifecycle with per-type loan and penalty rules, and recommends
items to patrons through a five-stage filter chain and an explained
0-100 score. A FastMCP server exposes these operations as tools.
"""

__version__ = "0.1.0"
