"""Infrastructure Layer.

Concrete implementations: SDK adapters, resilience, caching, config, CLI output.
"""
