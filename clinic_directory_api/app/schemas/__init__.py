"""
Pydantic schema definitions for API payloads.

Each entity (clinics, doctors, health services) defines its own request
and response models.  Responses use the camelCase ``healthServices``
spelling on the wire while services work with ``health_services``.
"""
