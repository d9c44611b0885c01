"""Keyword-based extraction of infrastructure intent from plain text."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_PROVIDER = "aws"
DEFAULT_INTENT = "create"

_CLOUD_PROVIDERS: dict[str, tuple[str, ...]] = {
    "aws": ("aws", "amazon", "ec2", "s3", "rds", "vpc", "lambda"),
    "azure": ("azure", "microsoft", "vm", "storage", "sql"),
    "gcp": ("gcp", "google", "compute", "storage", "cloud"),
}

_RESOURCE_TYPES: dict[str, tuple[str, ...]] = {
    "compute": ("vm", "instance", "server", "compute", "ec2"),
    "storage": ("storage", "bucket", "s3", "blob", "disk"),
    "network": (
        "vpc", "network", "subnet", "security group", "firewall",
        "load balancer", "alb", "nlb",
    ),
    "database": ("database", "db", "rds", "sql", "mysql", "postgres", "mongodb"),
    "container": ("container", "kubernetes", "k8s", "docker", "ecs", "aks", "gke"),
    "serverless": ("lambda", "function", "serverless", "azure functions", "cloud functions"),
}

_REQUIREMENT_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Security", (
        "secure", "security", "encrypted", "ssl", "tls", "https",
        "private", "public", "firewall", "access control",
    )),
    ("Scalability", (
        "scalable", "auto scaling", "high availability", "redundant",
        "multi-az", "multi-region", "load balanced",
    )),
    ("Performance", ("fast", "performance", "optimized", "cached", "cdn")),
)

_NUMERIC_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"(\d+)\s*(gb|tb|mb)\s*(storage|disk|memory|ram)",
        r"(\d+)\s*(cpu|core|vcpu)",
        r"(\d+)\s*(instance|server|vm|node)",
        r"(\d+)\s*(port|ports)",
    )
)

_INTENT_WORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("create", ("create", "setup", "build", "deploy", "provision")),
    ("modify", ("update", "modify", "change", "scale", "resize")),
    ("delete", ("delete", "remove", "destroy", "terminate")),
)

_RESOURCE_NAMES = {
    "compute": "main_instance",
    "storage": "main_storage",
    "network": "main_network",
    "database": "main_database",
    "container": "main_cluster",
    "serverless": "main_function",
}


@dataclass
class Resource:
    """An infrastructure resource identified in a description."""

    type: str
    name: str
    properties: dict[str, str] = field(default_factory=dict)
    attributes: list[str] = field(default_factory=list)


@dataclass
class ParsedInput:
    """Structured result of parsing a natural language description."""

    original_text: str
    cloud_provider: str = ""
    resources: list[Resource] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    intent: str = ""


class Engine:
    """Turns free-form infrastructure descriptions into a ParsedInput."""

    def __init__(self) -> None:
        self.cloud_providers = dict(_CLOUD_PROVIDERS)
        self.resource_types = dict(_RESOURCE_TYPES)

    def parse(self, text: str) -> ParsedInput:
        """Parse a description; the stored text is trimmed and lower-cased."""
        text = text.strip().lower()
        return ParsedInput(
            original_text=text,
            cloud_provider=self.detect_cloud_provider(text),
            resources=self.extract_resources(text),
            requirements=self.extract_requirements(text),
            intent=self.determine_intent(text),
        )

    def detect_cloud_provider(self, text: str) -> str:
        """Return the provider with most keyword hits (earliest on ties), else aws."""
        best, best_score = DEFAULT_PROVIDER, 0
        for provider, keywords in self.cloud_providers.items():
            score = sum(keyword in text for keyword in keywords)
            if score > best_score:
                best, best_score = provider, score
        return best

    def extract_resources(self, text: str) -> list[Resource]:
        """Return one resource for each resource type mentioned in the text."""
        return [
            Resource(
                type=resource_type,
                name=self.generate_resource_name(resource_type),
                attributes=self.extract_attributes(text, resource_type),
            )
            for resource_type, keywords in self.resource_types.items()
            if any(keyword in text for keyword in keywords)
        ]

    def extract_requirements(self, text: str) -> list[str]:
        """Return security, scalability, performance and numeric requirements."""
        requirements = [
            f"{category}: {pattern}"
            for category, patterns in _REQUIREMENT_PATTERNS
            for pattern in patterns
            if pattern in text
        ]
        requirements.extend(self.extract_numeric_requirements(text))
        return requirements

    def extract_numeric_requirements(self, text: str) -> list[str]:
        """Return quantities such as '3 servers' or '100gb storage'."""
        return [
            "Specification: " + " ".join(match.groups())
            for pattern in _NUMERIC_PATTERNS
            for match in pattern.finditer(text)
        ]

    def extract_attributes(self, text: str, resource_type: str) -> list[str]:
        """Return context attributes for the given resource type."""
        attributes: list[str] = []
        if resource_type == "compute":
            if any(word in text for word in ("linux", "ubuntu", "centos")):
                attributes.append("os:linux")
            if "windows" in text:
                attributes.append("os:windows")
        elif resource_type == "network":
            if "public" in text:
                attributes.append("access:public")
            if "private" in text:
                attributes.append("access:private")
        elif resource_type == "database":
            if "mysql" in text:
                attributes.append("engine:mysql")
            if "postgres" in text:
                attributes.append("engine:postgresql")
        return attributes

    def determine_intent(self, text: str) -> str:
        """Return 'create', 'modify' or 'delete'; 'create' when unclear."""
        for intent, words in _INTENT_WORDS:
            if any(word in text for word in words):
                return intent
        return DEFAULT_INTENT

    def generate_resource_name(self, resource_type: str) -> str:
        """Return the conventional resource name for a resource type."""
        return _RESOURCE_NAMES.get(resource_type, f"main_{resource_type}")