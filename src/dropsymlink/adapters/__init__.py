"""Adapters connecting the domain to concrete store backends."""
