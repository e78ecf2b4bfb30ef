"""
Application package.

Layout:

* ``core``: configuration, logging, SQLite access, the document store,
  id‑set algebra, roles and token security.
* ``schemas``: pydantic request and response models.
* ``services``: one service per entity plus the cross‑entity cascades.
* ``api``: versioned FastAPI routers.
"""
