# Routes package init
"""
SNS API Server — API Routes Package
====================================

Route Inventory:
    - health.py:  GET  /                        (liveness message)
                  GET  /health                  (database health check)
    - posts.py:   GET  /api/posts               (list posts with likes)
                  POST /api/posts               (create post)
                  DELETE /api/posts/{id}        (delete post)
                  POST /api/posts/{id}/like     (like)
                  DELETE /api/posts/{id}/like   (unlike)

Routes stay thin: extract input, call PostService, return the model.
"""
