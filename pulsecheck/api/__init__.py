"""HTTP-layer helpers for hosts mounting the status plugin."""
