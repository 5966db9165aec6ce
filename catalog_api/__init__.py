"""Product catalog service.

Storefront listing, admin back office, print catalog layout and sitemap
over a category forest and its products.
"""

__version__ = "0.1.0"
