"""PinShare: share small files by name and secret code."""
