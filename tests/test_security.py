import re

import pytest

from tfnlp.security import (
    Issue,
    Scanner,
    SecurityRule,
    default_rules,
    extract_resource_name,
)


@pytest.fixture
def scanner():
    return Scanner()


def rules_of(issues):
    return [issue.rule for issue in issues]


def test_default_rules_ids_in_order():
    assert [rule.id for rule in default_rules()] == [
        "SEC001", "SEC002", "SEC003", "SEC004", "SEC005",
        "SEC006", "SEC007", "SEC008", "SEC009", "SEC010",
    ]


def test_scanner_starts_with_default_rules(scanner):
    assert [r.id for r in scanner.rules] == [r.id for r in default_rules()]


def test_empty_config_has_no_issues(scanner):
    assert scanner.scan("") == []


def test_public_read_acl(scanner):
    issues = scanner.scan('acl = "public-read"')
    assert rules_of(issues) == ["SEC001"]
    assert issues[0].severity == "HIGH"
    assert issues[0].line == 1
    assert issues[0].message == "S3 bucket configured with public read access"


def test_s3_bucket_line_and_context_issues(scanner):
    config = 'resource "aws_s3_bucket" "logs" {\n  bucket = "logs"\n}'
    issues = scanner.scan(config)
    assert rules_of(issues) == ["SEC002", "SEC011", "SEC012", "SEC013"]
    assert issues[0].resource == "aws_s3_bucket.logs"
    assert issues[0].line == 1
    assert all(issue.line == 0 and issue.resource == "" for issue in issues[1:])


def test_s3_bucket_fully_configured_has_only_line_rule(scanner):
    config = "\n".join([
        'resource "aws_s3_bucket" "logs" {',
        "  server_side_encryption_configuration {}",
        "  versioning {}",
        "  mfa_delete = true",
        "}",
    ])
    assert rules_of(scanner.scan(config)) == ["SEC002"]


def test_open_security_group(scanner):
    config = 'ingress {\n  cidr_blocks = ["0.0.0.0/0"]\n}'
    issues = scanner.scan(config)
    assert rules_of(issues) == ["SEC003"]
    assert issues[0].severity == "CRITICAL"
    assert issues[0].line == 2


def test_short_hardcoded_password_hits_two_rules(scanner):
    issues = scanner.scan('password = "secret"')
    assert rules_of(issues) == ["SEC006", "SEC007"]


def test_long_hardcoded_password_hits_secret_rule_only(scanner):
    assert rules_of(scanner.scan('password = "password"')) == ["SEC007"]


def test_interpolated_password_is_not_flagged(scanner):
    assert scanner.scan('password = "${var.db_password}"') == []


def test_publicly_accessible_and_backup(scanner):
    config = "publicly_accessible = true\nbackup_retention_period = 0"
    issues = scanner.scan(config)
    assert rules_of(issues) == ["SEC005", "SEC010"]
    assert [i.line for i in issues] == [1, 2]


def test_http_listener(scanner):
    assert rules_of(scanner.scan('protocol = "HTTP"')) == ["SEC008"]


def test_instance_without_security_groups(scanner):
    issues = scanner.scan('resource "aws_instance" "web" {\n}')
    assert rules_of(issues) == ["SEC014"]
    assert issues[0].severity == "HIGH"


def test_instance_with_security_groups(scanner):
    config = 'resource "aws_instance" "web" {\n  vpc_security_group_ids = [aws_security_group.web.id]\n}'
    assert scanner.scan(config) == []


def test_db_instance_without_encryption(scanner):
    assert rules_of(scanner.scan('resource "aws_db_instance" "db" {\n}')) == ["SEC015"]
    encrypted = 'resource "aws_db_instance" "db" {\n  storage_encrypted = true\n}'
    assert scanner.scan(encrypted) == []


def test_extract_resource_name():
    assert extract_resource_name('resource "aws_vpc" "main" {') == "aws_vpc.main"
    assert extract_resource_name('data "aws_ami" "linux" {') == ""


def test_add_custom_rule_with_string_pattern(scanner):
    rule = SecurityRule(
        id="CUSTOM1",
        name="No debug",
        severity="LOW",
        pattern=r"debug\s*=\s*true",
        message="Debug enabled",
        remediation="Disable debug",
    )
    assert isinstance(rule.pattern, re.Pattern)
    scanner.add_custom_rule(rule)
    assert scanner.rules[-1] is rule
    issues = scanner.scan("x = 1\ndebug = true")
    assert issues == [
        Issue(
            severity="LOW",
            message="Debug enabled",
            resource="",
            line=2,
            rule="CUSTOM1",
            remediation="Disable debug",
        )
    ]


def test_add_advanced_security_rules(scanner):
    scanner.add_advanced_security_rules()
    assert [r.id for r in scanner.rules[-2:]] == ["SEC015", "SEC016"]
    assert len(scanner.rules) == len(default_rules()) + 2
    issues = scanner.scan('resource "aws_sns_topic" "alerts" {\n  "Resource": "*"\n}')
    assert rules_of(issues) == ["SEC016", "SEC015"]
    assert issues[0].resource == "aws_sns_topic.alerts"


def test_advanced_rules_not_present_by_default(scanner):
    assert scanner.scan('resource "aws_sns_topic" "alerts" {}') == []