# Routes package init
"""
Memos Backend - API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:       POST /api/auth/signup, /api/auth/signin
    - users.py:      /api/user (me, list, profile, update, settings)
    - memos.py:      /api/memo (CRUD, stats, view)
    - tags.py:       /api/tag
    - resources.py:  /api/resource, GET /o/r/{uid}/{filename}
    - workspace.py:  /api/workspace (profile, settings)
    - markdown.py:   /api/markdown (parse, restore)
    - health.py:     GET /health

Design Principle:
    Routes are THIN: extract request data, call a service, shape the
    response. Business rules live in services.
"""
