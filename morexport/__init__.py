"""
morexport
CSV exports of Kolmisoft MOR call-detail records, queried through an SSH tunnel.
"""

__version__ = '1.0.0'
