"""Adapters connecting the core pipeline to servers, stores and sources."""
