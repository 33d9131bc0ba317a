"""Domain layer: value objects, request models, errors and events.

Nothing in here imports the provider SDK.
"""
