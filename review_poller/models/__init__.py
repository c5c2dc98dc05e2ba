"""
Data models for the review poller.
"""
