"""Infrastructure layer: blob storage backends and SQL persistence."""
