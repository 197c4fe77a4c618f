"""Configuration module using Pydantic Settings.

Provides the machine topology and analysis options, loaded once at startup.

Usage:
    from schedlens.config import AnalysisSettings, MachineSettings

    settings = AnalysisSettings(machine=MachineSettings(...), unclassified="log")
"""

from schedlens.config.settings import AnalysisSettings, MachineSettings

__all__ = [
    "AnalysisSettings",
    "MachineSettings",
]
