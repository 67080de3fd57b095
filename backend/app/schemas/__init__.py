"""
Blog API — Pydantic Request/Response Schemas
==============================================

Schemas are the API contract and are kept separate from the ORM models.
No response schema has a password field, so a password hash can never be
serialized by accident.
"""
