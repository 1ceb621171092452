"""Graph model, validation and layout."""
