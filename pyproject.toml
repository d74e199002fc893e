[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jxsecret"
version = "0.1.0"
description = "Helpers for secret store backends, helm secret defaults, template lookups and replicating ExternalSecret resources across namespaces"
requires-python = ">=3.10"
keywords = ["kubernetes", "secrets", "external-secrets", "gitops", "vault", "htpasswd"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "bcrypt>=4.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
jx-secret-replicate = "jxsecret.replicate:main"

[tool.hatch.build.targets.wheel]
packages = ["jxsecret"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
