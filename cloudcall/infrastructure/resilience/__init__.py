"""API Resilience Implementations.

Contains the bounded request queue and the retry/backoff policy.
Bounded Context: API Resilience
"""
