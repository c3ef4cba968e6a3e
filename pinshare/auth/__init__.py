"""Bearer tokens, PIN/code hashing and auth dependencies."""
