"""Secret store backend types and the values written to them."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BackendType(str, Enum):
    """The backend type named in an ExternalSecret's ``spec.backendType``."""

    LOCAL = "local"
    VAULT = "vault"
    GSM = "gcpSecretsManager"
    AZURE = "azureKeyVault"
    AWS_SECRETS_MANAGER = "secretsManager"
    AWS_PARAMETER_STORE = "systemManager"


class StoreType(str, Enum):
    """The kind of secret store a secret manager talks to."""

    KUBERNETES = "kubernetes"
    VAULT = "vault"
    GSM = "gcpSecretsManager"
    AZURE = "azureKeyVault"
    AWS_SECRETS_MANAGER = "secretsManager"
    AWS_PARAMETER_STORE = "systemManager"


@dataclass
class PropertyValue:
    """A single property of a secret together with its value."""

    property: str = ""
    value: str = ""
    name: str = ""


@dataclass
class KeyProperties:
    """The properties to write under one key of a secret store."""

    key: str
    gcp_project: str = ""
    properties: list[PropertyValue] = field(default_factory=list)

    def __str__(self) -> str:
        names = ", ".join(p.property or p.name for p in self.properties)
        return f"key {self.key} properties {names}"


@dataclass
class SecretValue:
    """The value stored in a secret store: a single value or named properties."""

    value: str = ""
    property_values: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    secret_type: str = ""


def _as_backend(backend_type: BackendType | str) -> BackendType | None:
    try:
        return BackendType(backend_type)
    except ValueError:
        return None


def get_secret_store(backend_type: BackendType | str) -> StoreType:
    """Return the store type used for the given backend type.

    Raises ValueError if the backend type names no known store.
    """
    if _as_backend(backend_type) is BackendType.LOCAL:
        return StoreType.KUBERNETES
    value = backend_type.value if isinstance(backend_type, Enum) else backend_type
    try:
        return StoreType(value)
    except ValueError:
        raise ValueError(f"unknown secret store backend type {value!r}") from None


def get_secret_key(
    backend_type: BackendType | str, external_secret_name: str, key_name: str
) -> str:
    """Return the key to store a secret under: local secrets use the ExternalSecret name."""
    if _as_backend(backend_type) is BackendType.LOCAL:
        return external_secret_name
    return key_name


def _format_values(values: Iterable[PropertyValue]) -> dict[str, str]:
    return {(p.property or p.name): p.value for p in values}


def create_secret_value(
    backend_type: BackendType | str,
    values: list[PropertyValue],
    annotations: Mapping[str, str] | None,
    labels: Mapping[str, str] | None,
    secret_type: str,
) -> SecretValue:
    """Build the value to write to the store for the given backend."""
    backend = _as_backend(backend_type)
    if backend in (BackendType.VAULT, BackendType.AWS_SECRETS_MANAGER):
        return SecretValue(property_values=_format_values(values))
    if backend is BackendType.LOCAL:
        return SecretValue(
            property_values=_format_values(values),
            labels=dict(labels or {}),
            annotations=dict(annotations or {}),
            secret_type=secret_type,
        )
    if len(values) == 1 and not values[0].property:
        return SecretValue(value=values[0].value)
    return SecretValue(property_values=_format_values(values))


def get_external_secret_location(external_secret: Mapping[str, Any]) -> str:
    """Return the store location of an ExternalSecret resource given as a mapping."""
    spec = external_secret.get("spec") or {}
    metadata = external_secret.get("metadata") or {}
    backend = _as_backend(spec.get("backendType", ""))
    if backend is BackendType.GSM:
        return spec.get("projectId", "") or ""
    if backend is BackendType.AZURE:
        return spec.get("keyVaultName", "") or ""
    if backend is BackendType.VAULT:
        return os.environ.get("VAULT_ADDR", "")
    if backend is BackendType.AWS_SECRETS_MANAGER:
        return spec.get("region", "") or ""
    if backend is BackendType.LOCAL:
        return metadata.get("namespace", "") or ""
    return ""