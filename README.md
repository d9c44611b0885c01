# tfnlp

`tfnlp` turns a plain-English description of cloud infrastructure into a
Terraform configuration. It picks out the cloud provider, the kinds of
resources and the requirements mentioned in the description, asks an
OpenAI-compatible chat model for a matching configuration, checks and
formats the HCL it gets back, and scans the result for common security
mistakes.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command, `tf-nlp-agent`.

Generate a configuration from a description and print it:

```
tf-nlp-agent generate "Create an AWS VPC with public and private subnets"
```

Write it to a file instead:

```
tf-nlp-agent generate "Deploy ec2 instances with a load balancer" --output main.tf
```

`generate` also accepts `-p/--provider`, but the cloud provider used in the
prompt is the one detected in the description.

Check the syntax of an existing configuration and list any security findings:

```
tf-nlp-agent validate main.tf
```

Start the web server on all interfaces (port 8080 unless `--port` says
otherwise):

```
tf-nlp-agent serve --port 8080
```

`tf-nlp-agent --version` prints the version; `--config FILE` chooses the
settings file. A failing command prints `Error: ...` on standard error and
exits with status 1.

### AI credentials

Generation calls `POST {base_url}/chat/completions`. The base URL and key
come from the `OPENAI_BASE_URL` and `OPENAI_API_KEY` environment variables.
Without a base URL, `generate` (command and endpoint) reports
`OpenAI client not initialized`; validation and scanning work offline.

### Settings file

Settings are read from `.tf-nlp-agent.yaml` (or `.yml`) in your home
directory, then the current directory, or from the file given with
`--config`. Nested keys become dotted names:

```yaml
ai:
  provider: openai
security:
  scan_enabled: true
  fail_on_high: false
```

With `security.scan_enabled` set (the default), `generate` prints any
findings; with `security.fail_on_high` also set, it fails when a finding is
`HIGH` or `CRITICAL`. `tfnlp.cli.load_config(path)` returns the merged
settings.

## Web API

`tfnlp.web.create_app(ai_provider)` builds a Flask application;
`tfnlp.web.run_server(host, port)` serves it. Every response carries
permissive CORS headers and `OPTIONS` requests get `204`.

| Method | Path               | Body                                        |
|--------|--------------------|---------------------------------------------|
| POST   | `/api/v1/generate` | `{"description": "...", "provider": "aws"}` |
| POST   | `/api/v1/validate` | `{"configuration": "..."}`                  |
| GET    | `/api/v1/health`   | —                                           |

`generate` answers with `configuration`, `success` and, when present,
`issues`, `estimated_costs` and `error`; a missing description gives `400`,
a generation or validation failure `500`. `validate` answers
`{"success": true, "issues": [...]}`, or `success: false` with an `error`
(status `200` for a syntax error, `400` for a bad request body). Files in
`./web/static` are served under `/static`.

## Library use

```python
from tfnlp.nlp import Engine
from tfnlp.security import Scanner
from tfnlp.generator import Generator

parsed = Engine().parse("Create an AWS VPC with a private mysql database")
print(parsed.cloud_provider, parsed.intent, [r.type for r in parsed.resources])

generator = Generator()
config = generator.generate_from_template("aws-vpc", {})
formatted = generator.validate(config)

for issue in Scanner().scan(formatted):
    print(issue.severity, issue.rule, issue.line, issue.message)

print(generator.estimate_cost(formatted))
```

To generate with an explicit endpoint:

```python
from tfnlp.ai import OpenAIProvider

provider = OpenAIProvider(api_key="placeholder", base_url="http://localhost:8000/v1")
text = provider.generate_config(parsed)
```

Modules:

- `tfnlp.nlp` — `Engine`, `ParsedInput`, `Resource`: keyword detection of
  provider, resources, requirements and intent.
- `tfnlp.ai` — `Provider`, `OpenAIProvider`, `new_provider`,
  `clean_response` (strips markdown code fences), `AIError`.
- `tfnlp.hcl` — `check_syntax` and `format_hcl` (two-space indentation,
  `=` aligned in runs of attributes); `HCLSyntaxError`.
- `tfnlp.generator` — `Generator` with `validate`, `format`,
  `validate_with_terraform`, `generate_from_template`, `estimate_cost`;
  `ValidationError`.
- `tfnlp.templates` — `template_names()` (`aws-vpc`, `aws-web-app`,
  `gcp-gke`) and `get_template(name)`.
- `tfnlp.security` — `Scanner`, `SecurityRule`, `Issue`, `default_rules`,
  `extract_resource_name`. Line rules cover public ACLs, open CIDR blocks,
  short or hard-coded secrets, plain HTTP listeners, public RDS, default VPC
  and zero backup retention; whole-file checks cover missing S3 encryption,
  versioning and MFA delete, EC2 security groups and RDS storage encryption.
  `Scanner.add_custom_rule` and `Scanner.add_advanced_security_rules` add more.

## What it does not do

- It never runs `terraform plan` or `apply`. `Generator.validate_with_terraform`
  runs `terraform init` and `terraform validate` only, and needs the
  `terraform` command on `PATH`.
- The HCL checker is structural (tokens, brackets, blocks and attributes),
  not a full HCL parser, and the formatter only re-indents and aligns.
- Templates ignore the variables passed to `generate_from_template`.
- Cost estimates are fixed rough monthly figures, not live pricing.
- The only AI backend is an OpenAI-compatible chat endpoint; the `ai.model`
  setting is not applied (the model is `gpt-4` unless given to
  `OpenAIProvider`).
- The web server offers the JSON API and static files only; there is no
  built-in HTML page.