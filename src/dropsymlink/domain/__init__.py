"""Domain layer: mutation model, batch engines and the drop handler."""
