"""Glucose Wars: a tick-driven food arcade simulation served over HTTP and websockets."""
