"""hookbot - manage GitHub repository webhooks from chat."""
__version__ = "0.1.0"
