"""Option normalization, font resolution and rendering."""
