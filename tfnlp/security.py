"""Pattern-based security scanning of Terraform configurations."""

from __future__ import annotations

import re
from dataclasses import dataclass

_RESOURCE_DECLARATION = re.compile(r'resource\s+"([^"]+)"\s+"([^"]+)"')


@dataclass(frozen=True)
class Issue:
    """A security finding in a configuration."""

    severity: str
    message: str
    resource: str = ""
    line: int = 0
    rule: str = ""
    remediation: str = ""


@dataclass
class SecurityRule:
    """A line-level rule; the pattern may be given as a string."""

    id: str
    name: str
    severity: str
    pattern: re.Pattern[str] | str
    message: str
    remediation: str

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None  # type: ignore[union-attr]


def default_rules() -> list[SecurityRule]:
    """Return the built-in line-level rules."""
    return [
        SecurityRule(
            "SEC001", "Public S3 Bucket", "HIGH", r'acl\s*=\s*"public-read"',
            "S3 bucket configured with public read access",
            "Remove public ACL and use bucket policies for controlled access",
        ),
        SecurityRule(
            "SEC002", "Unencrypted Storage", "MEDIUM", r'resource\s+"aws_s3_bucket"',
            "S3 bucket may not have encryption enabled",
            "Enable server-side encryption for S3 buckets",
        ),
        SecurityRule(
            "SEC003", "Open Security Group", "CRITICAL",
            r'cidr_blocks\s*=\s*\["0\.0\.0\.0/0"\]',
            "Security group allows access from anywhere (0.0.0.0/0)",
            "Restrict CIDR blocks to specific IP ranges",
        ),
        SecurityRule(
            "SEC004", "Unencrypted EBS Volume", "MEDIUM", r'resource\s+"aws_ebs_volume"',
            "EBS volume may not have encryption enabled",
            "Enable encryption for EBS volumes",
        ),
        SecurityRule(
            "SEC005", "Public RDS Instance", "HIGH", r"publicly_accessible\s*=\s*true",
            "RDS instance is publicly accessible",
            "Set publicly_accessible to false for RDS instances",
        ),
        SecurityRule(
            "SEC006", "Weak Password Policy", "MEDIUM", r'password\s*=\s*"[^"]{1,7}"',
            "Password appears to be too short",
            "Use strong passwords with at least 8 characters",
        ),
        SecurityRule(
            "SEC007", "Hardcoded Secrets", "CRITICAL",
            r'(password|secret|key)\s*=\s*"[^$][^"]*"',
            "Potential hardcoded secret or password",
            "Use variables or AWS Secrets Manager for sensitive data",
        ),
        SecurityRule(
            "SEC008", "Missing HTTPS", "MEDIUM", r'protocol\s*=\s*"HTTP"',
            "Load balancer listener using HTTP instead of HTTPS",
            "Use HTTPS protocol for load balancer listeners",
        ),
        SecurityRule(
            "SEC009", "Default VPC Usage", "LOW", r"default\s*=\s*true.*vpc",
            "Using default VPC may not follow security best practices",
            "Create custom VPC with proper network segmentation",
        ),
        SecurityRule(
            "SEC010", "Missing Backup", "MEDIUM", r"backup_retention_period\s*=\s*0",
            "Database backup retention period is set to 0",
            "Enable automated backups with appropriate retention period",
        ),
    ]


def _advanced_rules() -> list[SecurityRule]:
    return [
        SecurityRule(
            "SEC015", "IAM Policy Wildcard Resources", "HIGH", r'"Resource":\s*"\*"',
            "IAM policy grants access to all resources using wildcard",
            "Specify explicit resource ARNs instead of using wildcards",
        ),
        SecurityRule(
            "SEC016", "Unencrypted SNS Topic", "MEDIUM", r'resource\s+"aws_sns_topic"',
            "SNS topic may not have encryption enabled",
            "Enable KMS encryption for SNS topics",
        ),
    ]


# (resource marker, settings whose absence is a finding, finding)
_CONTEXT_CHECKS: tuple[tuple[str, tuple[str, ...], Issue], ...] = (
    ("aws_s3_bucket", ("server_side_encryption",), Issue(
        severity="MEDIUM",
        message="S3 bucket missing server-side encryption configuration",
        rule="SEC011",
        remediation="Add server_side_encryption_configuration block",
    )),
    ("aws_s3_bucket", ("versioning",), Issue(
        severity="LOW",
        message="S3 bucket missing versioning configuration",
        rule="SEC012",
        remediation="Enable versioning for S3 buckets",
    )),
    ("aws_s3_bucket", ("mfa_delete",), Issue(
        severity="LOW",
        message="S3 bucket missing MFA delete protection",
        rule="SEC013",
        remediation="Enable MFA delete for S3 buckets containing sensitive data",
    )),
    ("aws_instance", ("security_groups", "vpc_security_group_ids"), Issue(
        severity="HIGH",
        message="EC2 instance missing security group configuration",
        rule="SEC014",
        remediation="Assign appropriate security groups to EC2 instances",
    )),
    ("aws_db_instance", ("storage_encrypted",), Issue(
        severity="MEDIUM",
        message="RDS instance missing storage encryption",
        rule="SEC015",
        remediation="Enable storage encryption for RDS instances",
    )),
)


def extract_resource_name(line: str) -> str:
    """Return 'type.name' for a resource declaration line, else ''."""
    match = _RESOURCE_DECLARATION.search(line)
    return f"{match.group(1)}.{match.group(2)}" if match else ""


class Scanner:
    """Scans configurations against line rules and whole-file checks."""

    def __init__(self) -> None:
        self.rules: list[SecurityRule] = default_rules()

    def scan(self, config: str) -> list[Issue]:
        """Return every finding: line rules in line order, then contextual ones."""
        issues = [
            Issue(
                severity=rule.severity,
                message=rule.message,
                resource=extract_resource_name(line),
                line=number,
                rule=rule.id,
                remediation=rule.remediation,
            )
            for number, line in enumerate(config.split("\n"), start=1)
            for rule in self.rules
            if rule.matches(line)
        ]
        issues.extend(self._contextual_issues(config))
        return issues

    @staticmethod
    def _contextual_issues(config: str) -> list[Issue]:
        return [
            issue
            for marker, required, issue in _CONTEXT_CHECKS
            if marker in config and not any(setting in config for setting in required)
        ]

    def add_custom_rule(self, rule: SecurityRule) -> None:
        """Append a rule to those applied to each line."""
        self.rules.append(rule)

    def add_advanced_security_rules(self) -> None:
        """Append the IAM wildcard and SNS encryption rules."""
        self.rules.extend(_advanced_rules())