"""
deploy-events CLI

Commands:
- deploy-events events translate/page - Log translation and offline paging
- deploy-events topology classify/units - Operation lookup against a cluster
- deploy-events collect - Live collection until a page is complete
"""

__version__ = "0.1.0"
