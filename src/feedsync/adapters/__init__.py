"""Adapters connecting the domain ports to HTTP services."""
