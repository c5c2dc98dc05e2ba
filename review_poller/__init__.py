"""
App Review Poller.

Polls App Store review feeds for a configured set of apps, keeps a
deduplicated store of reviews on disk, and serves them over a JSON API.
"""
