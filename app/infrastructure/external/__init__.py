"""External services: blob storage."""
