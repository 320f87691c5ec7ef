"""
Backend package for the KSSV website and case-management API.

This package provides a FastAPI application over a relational database
(Postgres in production, an in-memory store for development and tests)
serving the public site content, the intake forms and the admin dashboard.
"""
