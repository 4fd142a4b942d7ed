"""
restwalk - Rate-limited client engine for paginated REST APIs.

Fetches every page of a collection resource while staying under the
remote service's requests-per-second ceiling, picking sequential or
parallel pagination from the headers the server returns.
"""

__version__ = "0.1.0"
__app_name__ = "restwalk"
