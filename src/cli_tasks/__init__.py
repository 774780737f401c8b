"""Command-line todo list backed by SQLite."""
