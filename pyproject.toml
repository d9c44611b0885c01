[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tfnlp"
version = "1.0.0"
description = "Turn natural-language infrastructure descriptions into Terraform configurations, with HCL checking, formatting and security scanning."
requires-python = ">=3.10"
dependencies = [
    "httpx",
    "flask",
    "pyyaml",
]
keywords = [
    "terraform",
    "hcl",
    "infrastructure-as-code",
    "nlp",
    "code-generation",
    "security-scanning",
    "openai",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tf-nlp-agent = "tfnlp.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tfnlp"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
