"""Domain module for reconciliation logic."""

from .deduplication import HireDeduplicator, JobReconciler, levenshtein

__all__ = ['HireDeduplicator', 'JobReconciler', 'levenshtein']
