"""Data models for storyarch."""

from storyarch.models.project import Project

__all__ = ["Project"]
