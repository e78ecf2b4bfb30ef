"""
Top‑level package for the Clinic Directory API.

All functionality lives in submodules under ``app``; this marker makes
``clinic_directory_api.app.main`` importable from the project root.
"""

__all__ = []
