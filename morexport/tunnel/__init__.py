"""
morexport/tunnel: SSH hop and the query executor that runs through it.
"""
