"""Domain Events:

Lifecycle notifications for provider requests (queued, retried, failed...).
"""
