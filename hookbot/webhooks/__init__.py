"""Receiver for GitHub events delivered to registered hooks."""
