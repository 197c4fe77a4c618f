"""Configuration settings using Pydantic Settings.

Provides the immutable machine description the topology resolver consumes,
plus the analysis options a caller hands to the summary layer.

Usage:
    from schedlens.config import AnalysisSettings, MachineSettings

    # Load from environment variables (SCHEDLENS_MACHINE_*) or config.toml
    settings = AnalysisSettings()

    # Or build explicitly
    machine = MachineSettings(
        cpus=8,
        sockets=2,
        cores_per_socket=4,
        numa_nodes=2,
        numa_node_ranges=[[[0, 3]], [[4, 7]]],
    )
"""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class MachineSettings(BaseSettings):  # type: ignore[misc]
    """Static CPU topology of the traced machine.

    Attributes:
        cpus: Number of logical CPUs.
        socket_order: Lay CPUs out grouped by socket instead of by kernel id.
        sockets: Number of physical packages.
        cores_per_socket: Physical cores in each package.
        threads_per_core: Hardware threads per core.
        numa_nodes: Number of NUMA nodes.
        numa_node_ranges: Per socket, ordered inclusive [low, high] cpu id ranges.

    Environment Variables:
        SCHEDLENS_MACHINE_CPUS
        SCHEDLENS_MACHINE_SOCKET_ORDER
        SCHEDLENS_MACHINE_SOCKETS
        SCHEDLENS_MACHINE_CORES_PER_SOCKET
        SCHEDLENS_MACHINE_THREADS_PER_CORE
        SCHEDLENS_MACHINE_NUMA_NODES
        SCHEDLENS_MACHINE_NUMA_NODE_RANGES (JSON)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDLENS_MACHINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    cpus: int
    socket_order: bool = False
    sockets: int
    cores_per_socket: int
    threads_per_core: int = 1
    numa_nodes: int
    numa_node_ranges: list[list[list[int]]]

    @field_validator("cpus", "sockets", "cores_per_socket", "threads_per_core", "numa_nodes")
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"must be positive, got {value}")
        return value

    @field_validator("numa_node_ranges")
    @classmethod
    def check_ranges(cls, value: list[list[list[int]]]) -> list[list[list[int]]]:
        for socket_ranges in value:
            for cpu_range in socket_ranges:
                if len(cpu_range) != 2:
                    raise ValueError(f"range must be [low, high], got {cpu_range}")
                low, high = cpu_range
                if low < 0 or low > high:
                    raise ValueError(f"invalid cpu range [{low}, {high}]")
        return value

    @model_validator(mode="after")
    def check_socket_count(self) -> MachineSettings:
        if len(self.numa_node_ranges) != self.sockets:
            raise ValueError(
                f"numa_node_ranges lists {len(self.numa_node_ranges)} sockets, "
                f"expected {self.sockets}"
            )
        return self


class AnalysisSettings(BaseSettings):  # type: ignore[misc]
    """Top-level configuration for a trace analysis run.

    Reads an optional ``config.toml`` with a ``[machine]`` table, then
    environment variables, then explicit keyword arguments (highest priority).

    Attributes:
        machine: Topology of the traced machine.
        unclassified: What the summary does with migrations that have no
            wake history: drop them, log them at debug level, or count them.

    Environment Variables:
        SCHEDLENS_UNCLASSIFIED
        SCHEDLENS_MACHINE__<FIELD> (nested)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDLENS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        toml_file="config.toml",
        extra="ignore",
        frozen=True,
    )

    machine: MachineSettings
    unclassified: Literal["drop", "log", "surface"] = "surface"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )
