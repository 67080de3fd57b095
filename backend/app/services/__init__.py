"""
Blog API — Services Layer
===========================

What:  Business logic between the routes (HTTP) and the repositories
       (persistence). Services are stateless; each call receives the
       request's session and, for writes, the acting Identity.

Service Inventory:
    - Authenticator (auth_service): password hashing, login, tokens
    - authorization:                ownership guard for mutations
    - pagination:                   page/page_size clamping
    - UserService:                  signup, profile, public user lookup
    - PostService:                  posts, taxonomy, media, revisions
    - CommentService:               comments on a post
    - LikeService:                  likes on a post
"""
