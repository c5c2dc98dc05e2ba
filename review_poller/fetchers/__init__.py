"""
Review fetchers.

Implementations of the ReviewsFetcher capability:
- iTunes customer reviews RSS feed
- Mock fetcher for offline runs and demos
"""
