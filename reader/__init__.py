"""Reading-view pipeline, layout and settings."""
