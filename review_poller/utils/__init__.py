"""
Utility modules for the review poller.
"""
