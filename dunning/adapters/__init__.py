"""Adapters for external billing systems."""
