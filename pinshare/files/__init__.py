"""File records and object storage."""
