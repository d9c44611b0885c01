import pytest

from tfnlp.hcl import check_syntax, format_hcl
from tfnlp.templates import get_template, template_names


def test_template_names():
    assert template_names() == ("aws-vpc", "aws-web-app", "gcp-gke")


@pytest.mark.parametrize("name", ["aws-vpc", "aws-web-app", "gcp-gke"])
def test_templates_are_valid_hcl(name):
    assert check_syntax(get_template(name)) is None


@pytest.mark.parametrize("name", ["aws-vpc", "aws-web-app", "gcp-gke"])
def test_templates_are_already_formatted(name):
    text = get_template(name)
    assert format_hcl(text) == text


@pytest.mark.parametrize(
    ("name", "marker"),
    [
        ("aws-vpc", 'resource "aws_vpc" "main"'),
        ("aws-web-app", 'resource "aws_lb_listener" "web"'),
        ("gcp-gke", 'resource "google_container_cluster" "primary"'),
    ],
)
def test_template_contents(name, marker):
    assert marker in get_template(name)


def test_templates_start_with_heading_comment():
    assert all(get_template(name).startswith("# ") for name in template_names())


def test_unknown_template_raises():
    with pytest.raises(KeyError, match="unknown template"):
        get_template("azure-aks")