import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from tfnlp.ai import clean_response
from tfnlp.cli import has_high_severity_issues, load_config, main
from tfnlp.generator import Generator
from tfnlp.security import Issue

BUCKET = 'resource "aws_s3_bucket" "b" {\n  acl = "public-read"\n}\n'
CLEAN = 'variable "region" {\n  type = string\n}\n'


@pytest.fixture
def completion_server(monkeypatch):
    replies = {"content": ""}

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            self.rfile.read(length)
            body = json.dumps(
                {"choices": [{"message": {"content": replies["content"]}}]}
            ).encode()
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_BASE_URL", f"http://127.0.0.1:{server.server_port}")
    monkeypatch.setenv("OPENAI_API_KEY", "placeholder")
    yield replies
    server.shutdown()
    server.server_close()


@pytest.fixture
def missing_config(tmp_path):
    return str(tmp_path / "absent.yaml")


def test_has_high_severity_issues():
    assert has_high_severity_issues([Issue(severity="HIGH", message="m")])
    assert has_high_severity_issues([Issue("LOW", "a"), Issue("CRITICAL", "b")])
    assert not has_high_severity_issues([Issue("LOW", "a"), Issue("MEDIUM", "b")])
    assert not has_high_severity_issues([])


def test_load_config_defaults(missing_config):
    settings = load_config(missing_config)
    assert settings["ai.provider"] == "openai"
    assert settings["ai.model"] == "gpt-4"
    assert settings["security.scan_enabled"] is True
    assert settings["security.fail_on_high"] is False
    assert settings["templates.path"] == "./templates"


def test_load_config_from_file(tmp_path, capsys):
    path = tmp_path / "settings.yaml"
    path.write_text("ai:\n  provider: custom\nsecurity:\n  fail_on_high: true\n")
    settings = load_config(str(path))
    assert settings["ai.provider"] == "custom"
    assert settings["security.fail_on_high"] is True
    assert settings["ai.model"] == "gpt-4"
    assert "Using config file:" in capsys.readouterr().err


def test_load_config_environment_override(monkeypatch, missing_config):
    monkeypatch.setenv("AI.MODEL", "other-model")
    assert load_config(missing_config)["ai.model"] == "other-model"


def test_validate_command_reports_issues(tmp_path, capsys, missing_config):
    path = tmp_path / "main.tf"
    path.write_text(BUCKET)
    assert main(["--config", missing_config, "validate", str(path)]) == 0
    out = capsys.readouterr().out
    assert f"Validation successful for: {path}" in out
    assert "  - HIGH: S3 bucket configured with public read access" in out


def test_validate_command_clean_file(tmp_path, capsys, missing_config):
    path = tmp_path / "main.tf"
    path.write_text(CLEAN)
    assert main(["--config", missing_config, "validate", str(path)]) == 0
    assert "No security issues found." in capsys.readouterr().out


def test_validate_command_bad_syntax(tmp_path, capsys, missing_config):
    path = tmp_path / "main.tf"
    path.write_text("resource {")
    assert main(["--config", missing_config, "validate", str(path)]) == 1
    assert "Error: validation failed:" in capsys.readouterr().err


def test_validate_command_missing_file(tmp_path, capsys, missing_config):
    assert main(["--config", missing_config, "validate", str(tmp_path / "nope.tf")]) == 1
    assert "Error: failed to read file:" in capsys.readouterr().err


def test_generate_writes_output(tmp_path, capsys, completion_server, missing_config):
    reply = '```hcl\nvariable "region" {\ntype = string\n}\n```'
    completion_server["content"] = reply
    output = tmp_path / "out.tf"
    code = main(["--config", missing_config, "generate", "create a vpc", "-o", str(output)])
    assert code == 0
    assert output.read_text() == Generator().validate(clean_response(reply))
    out = capsys.readouterr().out
    assert "Processing: create a vpc" in out
    assert f"Configuration written to: {output}" in out


def test_generate_prints_to_stdout(capsys, completion_server, missing_config):
    completion_server["content"] = CLEAN
    assert main(["--config", missing_config, "generate", "create a vpc"]) == 0
    out = capsys.readouterr().out
    assert "Generated Terraform Configuration:" in out
    assert Generator().validate(CLEAN) in out


def test_generate_fails_on_high(tmp_path, capsys, completion_server):
    completion_server["content"] = BUCKET
    config = tmp_path / "settings.yaml"
    config.write_text("security:\n  fail_on_high: true\n")
    assert main(["--config", str(config), "generate", "create s3 bucket"]) == 1
    captured = capsys.readouterr()
    assert "Security issues found:" in captured.out
    assert "Error: high severity security issues found" in captured.err


def test_generate_scan_disabled(tmp_path, capsys, completion_server):
    completion_server["content"] = BUCKET
    config = tmp_path / "settings.yaml"
    config.write_text("security:\n  scan_enabled: false\n  fail_on_high: true\n")
    assert main(["--config", str(config), "generate", "create s3 bucket"]) == 0
    assert "Security issues found:" not in capsys.readouterr().out


def test_generate_without_endpoint(monkeypatch, capsys, missing_config):
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    assert main(["--config", missing_config, "generate", "create a vpc"]) == 1
    assert "Error: failed to generate configuration:" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "1.0.0" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "tf-nlp-agent" in capsys.readouterr().out