# Routes package init
"""
SPA Images Backend: API Routes Package
=======================================

Route Inventory:
    - health.py:  GET  /health            (service health check)
    - images.py:  GET  /images            (list images in display order)
                  POST /images            (validate + create)
                  GET  /images/:id        (single image)
                  PUT  /images/:id        (validate + full replace)
                  DELETE /images/:id      (delete)

Routes stay thin: they parse the request, call ImageService, and pick the
status code. Validation lives in services/validation.py, storage in
services/image_service.py.
"""
