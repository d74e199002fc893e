# jxsecret

Helpers for working with `ExternalSecret` resources in a GitOps repository:

- `jxsecret.backends`: mapping backend types (`vault`, `gcpSecretsManager`,
  `azureKeyVault`, `secretsManager`, `systemManager`, `local`) to secret store
  types, keys and locations, and building the values written to a store;
- `jxsecret.helmsecrets`: reading default values from helm generated Secret
  files;
- `jxsecret.templater`: resolving `namespace.name` lookups, preparing
  requirements for templates and making `user:password` and `htpasswd` entries;
- `jxsecret.replicate`: copying `ExternalSecret` resources into other
  environment namespaces.

## Install

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Replicating ExternalSecrets

The `jx-secret-replicate` command copies `ExternalSecret` resources from one
namespace directory of `config-root/namespaces` into others. Each copy gets a
`metadata.namespace` for its target and the annotation
`secret.jenkins-x.io/replica: "true"`. If the source uses the `local` backend,
it is given the annotation `secret.jenkins-x.io/replicate-to` listing the
namespaces it was copied to.

The command works on `config-root` in the current directory. Without `--to`,
the target namespaces are those of the `Permanent` `Environment` resources found
in the source namespace directory.

Copy the secrets that carry a label into the permanent environment namespaces
(for example staging and production):

```
jx-secret-replicate --selector secret.jenkins-x.io/replica-source=true
```

Copy named secrets into the namespaces you choose:

```
jx-secret-replicate --name knative-docker-user-pass --name lighthouse-oauth-token \
    --to jx-staging --to jx-production
```

Options:

- `--output-dir` / `-o`: the output directory (default `config-root`)
- `--from`: the namespace to copy from (default `jx`)
- `--to` / `-t`: a target namespace; you can give it more than once
- `--name` / `-n`: the name of an ExternalSecret; you can give it more than once
- `--selector` / `-s`: a label selector; its `key=value` terms are used for matching
- `--file` / `-f`: must not be empty (default `t`)
- `--verbose`: debug logging
- `--batch-mode` / `-b`: accepted for compatibility

The command exits with status 1 and prints the error when replication fails.

## From Python

```python
from jxsecret.replicate import ReplicateOptions

options = ReplicateOptions(dir="path/to/repo", selector="secret.jenkins-x.io/replica-source=true")
options.run()
print(options.to)
```

```python
from jxsecret.backends import BackendType, get_secret_key, get_secret_store

get_secret_store(BackendType.LOCAL)                        # StoreType.KUBERNETES
get_secret_key(BackendType.LOCAL, "my-secret", "ignored")  # "my-secret"
```

```python
from jxsecret.helmsecrets import HelmSecretCache

cache = HelmSecretCache(folder="helm-secrets")
cache.value("jx", "my-secret", "username")  # "" when the file or entry is missing
```

```python
from jxsecret.templater import auth_value, htpasswd, resolve_resource_names

resolve_resource_names("jx-staging.my-secret", "jx")  # ("my-secret", "jx-staging")
auth_value({"user": b"admin", "pass": b"secret"}, "user", "pass")  # "admin:secret"
htpasswd("admin", "password")  # "admin:$2a$10$..."
```

## What it does not do

The package does not connect to a Kubernetes cluster or to any secret store.
It has no command to populate, edit or verify secrets and no template engine:
it provides the pieces above, and replication works on YAML files on disk only.