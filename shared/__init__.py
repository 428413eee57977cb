"""Shared building blocks for Shipnix-Express services."""
