"""Chouten CLI - host for JavaScript content-extraction plugins."""

__app_name__ = "chouten"
__version__ = "0.1.0"
