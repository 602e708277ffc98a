"""Shared types: segment roles, wire constants and value objects."""
