"""Venue records."""
