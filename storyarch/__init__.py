"""storyarch - project registry with access control and snapshot persistence."""

__version__ = "0.1.0"
