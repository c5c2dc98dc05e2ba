"""
Runtime configuration for the review poller.
"""
