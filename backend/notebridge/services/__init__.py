# Services package init
"""
NoteBridge Backend - Services Layer
=====================================

What:  Orchestration between routes (HTTP) and the remote collaborators.

Service Inventory:
    - NotesAPIClient:    httpx client for the remote notes/folders API
    - FolderService:     folder listing with a configurable failure policy
    - NoteService:       create / update / delete, then refresh folders
    - ObjectStorage:     S3 (boto3) or local (aiofiles) attachment store
    - AttachmentService: upload → fetch note → append → write → re-fetch

Services are built per request by notebridge.dependencies and can be unit
tested with an httpx.MockTransport standing in for the notes service.
"""
