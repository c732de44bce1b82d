"""Service layer behind the HTTP API."""
