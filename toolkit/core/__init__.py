"""
Core primitives shared across the toolkit.

This package hosts:
- configuration (limits and allow-lists owned by the caller)
- the exception hierarchy returned to embedding handlers
- random identifiers and filesystem helpers

Services depend on these modules instead of reaching for os.environ or
raising bare OSErrors themselves.
"""
