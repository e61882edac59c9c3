"""Inventory records."""
