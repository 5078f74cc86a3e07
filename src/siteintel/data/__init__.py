"""Static datasets shipped with the service."""
