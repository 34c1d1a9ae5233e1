"""Event classification and dispatch."""
