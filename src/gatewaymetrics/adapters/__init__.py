"""Adapters connecting the core to metrics backends and web frameworks."""
