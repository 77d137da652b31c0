"""SQL persistence: engine, ORM models, repositories and migrations."""
