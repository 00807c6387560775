"""Order aggregate."""
