"""Configuration models."""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompilerSettings(BaseModel):
    """Compiler configuration."""
    log_level: str = Field(default="INFO")
    max_parallel_evaluations: int = Field(default=4, ge=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class EvaluatorConfig(BaseModel):
    """Inline evaluation configuration."""
    command: List[str] = Field(default_factory=lambda: ["nix-build", "--no-out-link"])
    nixpkgs: str = Field(default="<nixpkgs>", description="Nix expression for the host nixpkgs")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v):
        """Require a program to run."""
        if not v:
            raise ValueError("Evaluator command must not be empty")
        return v


class SystemdConfig(BaseModel):
    """Paths the generated files are installed to."""
    machines_dir: str = Field(default="/var/lib/machines")
    nspawn_dir: str = Field(default="/etc/systemd/nspawn")
    network_dir: str = Field(default="/etc/systemd/network")
    system_dir: str = Field(default="/etc/systemd/system")
    tmpfiles_dir: str = Field(default="/etc/tmpfiles.d")
    nftables_dir: str = Field(default="/etc/nftables.d")


class HostConfig(BaseModel):
    """Host facts shared by every container."""
    store_dir: str = Field(default="/nix/store")
    userns_base: int = Field(default=524288, ge=0, description="First UID/GID of the user namespace range")


class NspawncConfig(BaseModel):
    """Main configuration model."""
    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    evaluator: EvaluatorConfig = Field(default_factory=EvaluatorConfig)
    systemd: SystemdConfig = Field(default_factory=SystemdConfig)
    host: HostConfig = Field(default_factory=HostConfig)
    overlays: List[Union[str, Dict[str, Any]]] = Field(
        default_factory=list,
        description="NixOS modules imported by every inline evaluation",
    )

    model_config = ConfigDict(extra="ignore")
