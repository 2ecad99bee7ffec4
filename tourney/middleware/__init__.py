"""Middleware modules."""
