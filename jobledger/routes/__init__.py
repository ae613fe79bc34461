"""
FastAPI routers for all API endpoints.

Each module defines a router for one resource (jobs, expenses, transactions,
categories, clients, reports). Domain errors are mapped to HTTP responses by
routes.errors.
"""
