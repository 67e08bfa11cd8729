"""Shared utilities: exceptions and observability."""
