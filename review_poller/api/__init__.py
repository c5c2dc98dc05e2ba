"""
HTTP API for stored reviews.
"""
