"""Ports, loader and entry points backing the HTTP routes."""
