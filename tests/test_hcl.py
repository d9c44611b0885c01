import pytest

from tfnlp.hcl import HCLSyntaxError, check_syntax, format_hcl

VALID = '''resource "aws_vpc" "main" {
  cidr_block = "10.0.0.0/16"
  tags = {
    Name = "${var.environment}-vpc"
  }
}
'''


def test_valid_config_passes():
    assert check_syntax(VALID) is None


def test_single_line_block_passes():
    assert check_syntax('locals { a = 1 }\n') is None


def test_heredoc_inside_call_passes():
    text = 'resource "x" "y" {\n  data = f(<<-EOF\n    hi ${name}\n    EOF\n  )\n}\n'
    assert check_syntax(text) is None


@pytest.mark.parametrize(
    "text",
    [
        'resource "a" "b" {\n  x = 1\n',
        'x = "unterminated\n',
        'x =\n',
        'x = [1, 2)\n',
        'x = f(<<EOF\nbody\n',
        '}\n',
        '"label" {\n}\n',
        'x = 1 2 = 3 }\n',
        '/* never closed\n',
    ],
)
def test_invalid_config_raises(text):
    with pytest.raises(HCLSyntaxError):
        check_syntax(text)


def test_error_reports_line():
    with pytest.raises(HCLSyntaxError) as info:
        check_syntax('a = 1\nb = "open\n')
    assert info.value.line == 2


def test_syntax_error_is_value_error():
    with pytest.raises(ValueError):
        check_syntax("x = (\n")


def test_format_reindents_and_aligns():
    text = 'resource "a" "b" {\nname="x"\n      location = var.region\n}\n'
    expected = 'resource "a" "b" {\n  name     = "x"\n  location = var.region\n}\n'
    assert format_hcl(text) == expected


def test_format_does_not_align_across_blank_lines():
    text = "a = 1\n\nlonger = 2\n"
    assert format_hcl(text) == text


def test_format_multiline_attribute_breaks_group():
    text = 'x {\n  resource_type = "i"\n  tags = {\n    k = 1\n  }\n}\n'
    assert format_hcl(text) == text


def test_format_preserves_heredoc_body():
    text = 'x {\nv = f(<<-EOF\n      keep   this\n   EOF\n)\n}\n'
    result = format_hcl(text)
    assert "      keep   this\n   EOF" in result
    assert result.splitlines()[1] == "  v = f(<<-EOF"
    assert result.splitlines()[4] == "  )"


def test_format_is_idempotent():
    once = format_hcl('b {\nc=1\n   dd = [\n1,\n]\n}\n')
    assert format_hcl(once) == once
    assert check_syntax(once) is None


def test_format_rejects_unterminated_string():
    with pytest.raises(HCLSyntaxError):
        format_hcl('a = "b\n')