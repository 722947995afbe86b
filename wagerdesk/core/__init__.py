"""
Cross-cutting infrastructure: settings, database sessions, authentication,
errors, logging, metrics and rate limiting.
"""
