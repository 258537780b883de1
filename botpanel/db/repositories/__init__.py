"""
Per-domain repository modules for database access.

`owned` holds the owner-scoped CRUD shared by every tenant table; the other
modules add per-domain rules such as chatbot naming, cascades and the prompt
embedding pipeline.
"""
