"""Digest content — composing outstanding-task summaries."""

from taskflow.digest.composer import DigestContent, compose, group_tasks, is_overdue

__all__ = ["DigestContent", "compose", "group_tasks", "is_overdue"]
