"""
morexport/geo: offline phone number classification.
"""
