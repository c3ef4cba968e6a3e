"""Accounts identified by a numeric PIN."""
