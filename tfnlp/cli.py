"""Command line interface: generate, validate and serve Terraform configurations."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Sequence

import yaml

from .ai import AIError, new_provider
from .generator import Generator, ValidationError
from .nlp import Engine
from .security import Issue, Scanner

VERSION = "1.0.0"
CONFIG_NAME = ".tf-nlp-agent"

DEFAULTS: dict[str, Any] = {
    "ai.provider": "openai",
    "ai.model": "gpt-4",
    "terraform.default_provider": "aws",
    "terraform.validate": True,
    "terraform.format": True,
    "security.scan_enabled": True,
    "security.fail_on_high": False,
    "templates.path": "./templates",
}


class _CommandError(Exception):
    """A command failed; the message is shown to the user."""


def _flatten(mapping: dict, prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in mapping.items():
        name = f"{prefix}{str(key).lower()}"
        if isinstance(value, dict):
            flat.update(_flatten(value, name + "."))
        else:
            flat[name] = value
    return flat


def _find_config(path: str | None) -> Path | None:
    if path:
        candidate = Path(path)
        return candidate if candidate.is_file() else None
    for directory in (Path.home(), Path(".")):
        for suffix in (".yaml", ".yml"):
            candidate = directory / f"{CONFIG_NAME}{suffix}"
            if candidate.is_file():
                return candidate
    return None


def load_config(path: str | None = None) -> dict[str, Any]:
    """Return settings keyed by dotted name: defaults, then file, then environment.

    Without a path, .tf-nlp-agent.yaml is looked for in the home directory and
    then the current directory. A file that cannot be read is ignored.
    """
    settings = dict(DEFAULTS)
    found = _find_config(path)
    if found is not None:
        try:
            data = yaml.safe_load(found.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError):
            data = None
        if isinstance(data, dict):
            settings.update(_flatten(data))
            print(f"Using config file: {found}", file=sys.stderr)
    for key in list(settings):
        env_value = os.environ.get(key.upper())
        if env_value is not None:
            settings[key] = env_value
    return settings


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() in ("1", "t", "T", "true", "TRUE", "True")
    return bool(value)


def has_high_severity_issues(issues: Iterable[Issue]) -> bool:
    """Return True if any issue is HIGH or CRITICAL."""
    return any(issue.severity in ("HIGH", "CRITICAL") for issue in issues)


def _print_issues(issues: list[Issue]) -> None:
    print("Security issues found:")
    for issue in issues:
        print(f"  - {issue.severity}: {issue.message}")


def _generate(args: argparse.Namespace, settings: dict[str, Any]) -> None:
    provider = new_provider(str(settings["ai.provider"]))
    engine = Engine()
    generator = Generator()
    scanner = Scanner()

    print(f"Processing: {args.description}")
    parsed = engine.parse(args.description)

    try:
        config = provider.generate_config(parsed)
    except AIError as exc:
        raise _CommandError(f"failed to generate configuration: {exc}") from exc

    try:
        validated = generator.validate(config)
    except ValidationError as exc:
        raise _CommandError(f"failed to validate configuration: {exc}") from exc

    if _as_bool(settings["security.scan_enabled"]):
        issues = scanner.scan(validated)
        if issues:
            _print_issues(issues)
            if _as_bool(settings["security.fail_on_high"]) and has_high_severity_issues(issues):
                raise _CommandError("high severity security issues found")

    if args.output:
        try:
            Path(args.output).write_text(validated, encoding="utf-8")
        except OSError as exc:
            raise _CommandError(f"failed to write output file: {exc}") from exc
        print(f"Configuration written to: {args.output}")
    else:
        print("\nGenerated Terraform Configuration:")
        print("=" * 52)
        print(validated)


def _validate(args: argparse.Namespace, settings: dict[str, Any]) -> None:
    try:
        content = Path(args.file).read_text(encoding="utf-8")
    except OSError as exc:
        raise _CommandError(f"failed to read file: {exc}") from exc

    try:
        Generator().validate(content)
    except ValidationError as exc:
        raise _CommandError(f"validation failed: {exc}") from exc

    issues = Scanner().scan(content)
    print(f"Validation successful for: {args.file}")
    if issues:
        _print_issues(issues)
    else:
        print("No security issues found.")


def _serve(args: argparse.Namespace, settings: dict[str, Any]) -> None:
    from .web import run_server

    try:
        port = int(args.port)
    except ValueError as exc:
        raise _CommandError(f"invalid port: {args.port}") from exc
    print(f"Starting web server on port {args.port}")
    print(f"Open your browser to http://localhost:{args.port}")
    run_server("0.0.0.0", port)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tf-nlp-agent",
        description=(
            "TF-NLP-Agent converts natural language descriptions into functional "
            "Terraform configurations using AI and NLP techniques."
        ),
    )
    parser.add_argument("--version", action="version", version=f"tf-nlp-agent version {VERSION}")
    parser.add_argument(
        "--config", default="", help="config file (default is $HOME/.tf-nlp-agent.yaml)"
    )
    commands = parser.add_subparsers(dest="command")

    generate = commands.add_parser(
        "generate", help="Generate Terraform configuration from natural language"
    )
    generate.add_argument("description")
    generate.add_argument("-o", "--output", default="", help="output file for generated configuration")
    generate.add_argument("-p", "--provider", default="aws", help="cloud provider (aws, azure, gcp)")
    generate.set_defaults(handler=_generate)

    serve = commands.add_parser("serve", help="Start the web server")
    serve.add_argument("-p", "--port", default="8080", help="port to run the web server on")
    serve.set_defaults(handler=_serve)

    validate = commands.add_parser("validate", help="Validate a Terraform configuration file")
    validate.add_argument("file")
    validate.set_defaults(handler=_validate)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line interface and return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    settings = load_config(args.config or None)
    try:
        args.handler(args, settings)
    except _CommandError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())