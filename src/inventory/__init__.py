"""Book and genre inventory: validation, persistence and error taxonomy behind a small web UI."""
