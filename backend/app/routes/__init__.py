"""
Blog API — API Routes Package
===============================

Route Inventory (all under /api/v1 except /health):
    - auth.py:      POST /signup, POST /login                      (public)
    - users.py:     GET/PUT /profile, GET /users/{id}
    - posts.py:     /posts CRUD and /posts/{id}/revisions
    - comments.py:  /posts/{id}/comments CRUD
    - likes.py:     /posts/{id}/likes
    - health.py:    GET /health                                    (public)

Routes are thin: bind the request, call one service method, return its
result. Every router except auth and health requires a bearer token.
"""

API_PREFIX = "/api/v1"
