"""Caching Implementations.

Canonical call signatures and the in-flight call memoization cache.
Bounded Context: Cache Management
"""
