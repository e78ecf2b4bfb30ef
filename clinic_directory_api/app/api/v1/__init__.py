"""
Version 1 of the API.

Breaking changes to routes or payloads belong in a new version
subpackage (e.g. ``v2``).
"""
