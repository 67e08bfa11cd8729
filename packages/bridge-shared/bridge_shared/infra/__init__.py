"""Infrastructure: configuration."""
