# Services package init
"""
Memos Backend - Services Layer
===============================

What:  Business rules between the routes (HTTP) and the database.
How:   Services take an AsyncSession, the acting user and plain values, and
       return schema records. They never see Request objects; configuration
       values arrive as explicit arguments.

Service Inventory:
    - AuthService:      first-user signup and password sign-in
    - UserService:      profiles, listing (HOST) and per-user settings
    - MemoService:      memo CRUD, visibility rules, tag/resource sync, stats
    - TagService:       per-creator tags with memo counts
    - ResourceService:  uploads and their metadata
    - WorkspaceService: instance profile and setting documents
    - ObjectStore:      local disk or S3-compatible blob storage
    - to_memo_view:     memo record → client view with parsed nodes
"""
