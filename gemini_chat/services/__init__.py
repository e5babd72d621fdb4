"""Request pipeline services."""
