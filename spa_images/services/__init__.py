# Services package init
"""
SPA Images Backend: Services Layer
===================================

Service Inventory:
    - validation:     pure payload checks (url, rating, description) and
                      JavaScript-compatible number parsing
    - ImageService:   the storage collaborator (list, create, get, update,
                      delete, reorder) over async SQLAlchemy sessions
"""
