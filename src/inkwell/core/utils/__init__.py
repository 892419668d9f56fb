"""Small helpers shared across inkwell."""
