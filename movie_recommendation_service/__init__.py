"""Hybrid collaborative/content-based movie recommendation service."""
