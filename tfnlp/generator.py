"""Validation, formatting, templating and cost estimation of Terraform configurations."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Mapping

from .hcl import HCLSyntaxError, check_syntax, format_hcl
from .templates import get_template

# (marker in the configuration, cost line, rough monthly estimate)
_COST_TABLE: tuple[tuple[str, str, float], ...] = (
    ("aws_instance", "EC2 Instances", 50.0),
    ("aws_rds_instance", "RDS Database", 100.0),
    ("aws_lb", "Load Balancer", 25.0),
    ("aws_s3_bucket", "S3 Storage", 10.0),
    ("google_container_cluster", "GKE Cluster", 150.0),
)


class ValidationError(ValueError):
    """Raised when a configuration fails validation or formatting."""


class Generator:
    """Validates, formats and generates Terraform configurations."""

    def __init__(self, temp_dir: str | None = None) -> None:
        self.temp_dir = temp_dir or tempfile.gettempdir()

    def validate(self, config: str) -> str:
        """Check the HCL syntax of a configuration and return it formatted."""
        try:
            check_syntax(config)
        except HCLSyntaxError as exc:
            raise ValidationError(f"HCL syntax errors: {exc}") from exc
        try:
            return self.format(config)
        except ValidationError as exc:
            raise ValidationError(f"failed to format configuration: {exc}") from exc

    def format(self, config: str) -> str:
        """Return the configuration in canonical HCL layout."""
        try:
            return format_hcl(config)
        except HCLSyntaxError as exc:
            raise ValidationError(f"failed to parse HCL: {exc}") from exc

    def validate_with_terraform(self, config: str) -> None:
        """Run 'terraform init' and 'terraform validate' on the configuration."""
        if shutil.which("terraform") is None:
            raise ValidationError("terraform CLI not found")
        try:
            work = tempfile.TemporaryDirectory(dir=self.temp_dir, prefix="tf-nlp-validate-")
        except OSError as exc:
            raise ValidationError(f"failed to create temp directory: {exc}") from exc
        with work as directory:
            try:
                Path(directory, "main.tf").write_text(config, encoding="utf-8")
            except OSError as exc:
                raise ValidationError(f"failed to write config file: {exc}") from exc

            init = subprocess.run(
                ["terraform", "init"], cwd=directory, capture_output=True, text=True
            )
            if init.returncode != 0:
                raise ValidationError(f"terraform init failed: exit status {init.returncode}")

            result = subprocess.run(
                ["terraform", "validate"],
                cwd=directory,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
            if result.returncode != 0:
                raise ValidationError(f"terraform validate failed: {result.stdout}")

    def generate_from_template(
        self, template_name: str, variables: Mapping[str, Any] | None = None
    ) -> str:
        """Return a built-in template; raise KeyError for an unknown name."""
        return get_template(template_name)

    def estimate_cost(self, config: str) -> dict[str, float]:
        """Return rough monthly cost estimates keyed by resource category."""
        return {label: cost for marker, label, cost in _COST_TABLE if marker in config}