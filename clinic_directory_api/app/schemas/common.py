"""
Shared field types for request validation.

Identifiers are 32 lowercase hex characters (a UUID4 without dashes).
Malformed ids and blank names are rejected here, before any service
code runs.
"""

from typing import Annotated

from pydantic import StringConstraints

ID_PATTERN = r"^[0-9a-f]{32}$"

EntityId = Annotated[str, StringConstraints(pattern=ID_PATTERN)]

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
