"""Conductor - user, role and token management for a CouchDB-backed data collection platform."""

__version__ = "0.1.0"
