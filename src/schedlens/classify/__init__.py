"""Migration causality classification.

Usage:
    from schedlens.classify import MigrationCause, classify_migration

    cause = classify_migration(step.action.event, step.states, topology)
    if cause is MigrationCause.NUMA_BALANCING:
        ...
"""

from schedlens.classify.classifier import classify_migration
from schedlens.classify.models import ClassifiedMigration, MigrationCause

__all__ = [
    "ClassifiedMigration",
    "MigrationCause",
    "classify_migration",
]
