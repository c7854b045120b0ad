"""Persistence repositories and in-memory fakes."""
