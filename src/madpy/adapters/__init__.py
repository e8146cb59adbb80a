"""Adapters connecting the core to HTTP, threads and logging."""
