"""cloudcall: retrying, concurrency-limited, memoized AWS request layer."""

__version__ = "0.1.0"
