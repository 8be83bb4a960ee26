"""
NoteBridge Backend - Application Package Initializer
=====================================================

What: Marks the `notebridge` directory as a Python package.
Who:  Used by uvicorn (`uvicorn notebridge.main:app`), pytest and the route modules.

Architecture Note:
    NoteBridge owns no data. It sits between the web front-end and the remote
    notes service and reshapes responses for the front-end renderer.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, redirects, flash
    ├─────────────────────────────────────┤
    │         Services (Orchestration)    │  ← folder listing, note writes, uploads
    ├─────────────────────────────────────┤
    │   Notes API client / Object storage │  ← httpx, boto3, aiofiles
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
