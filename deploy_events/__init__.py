"""
Deployment Event Aggregation

Normalizes lifecycle log lines from distributed workers into index-keyed
events and serves range-complete pages to polling clients.
"""

__version__ = "0.1.0"
