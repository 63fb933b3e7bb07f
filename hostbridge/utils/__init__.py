"""Shared helpers for Host Bridge."""
