"""Province mountain map: name-based mountain association and map selection state."""
