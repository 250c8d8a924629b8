"""Content Agent: streaming, resumable AI content generation workflow."""

__version__ = "1.0.0"
