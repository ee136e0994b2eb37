"""Middleware package for FastAPI request/response processing.

Currently holds the /api/** rate limiter.
"""
