"""Core Application Layer.

Contains the request dispatcher and the command handler used by the CLI.
"""
