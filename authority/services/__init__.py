"""Scoring services for the reference authority.

Route handlers and socket handlers import from here so the ranking rules
stay in one place, separate from transport concerns.
"""
