"""Helpers used when secret values are produced from templates."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

import bcrypt

log = logging.getLogger(__name__)

# the work factor bcrypt uses by default for htpasswd entries
DEFAULT_BCRYPT_COST = 10


def resolve_resource_names(name: str, current_namespace: str) -> tuple[str, str]:
    """Split ``namespace.name`` into ``(name, namespace)``.

    A name without a dot is returned with the current namespace.
    """
    namespace, dot, rest = name.partition(".")
    if not dot:
        return name, current_namespace
    return rest, namespace


def create_requirements_map(requirements: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of the requirements ready to be passed to a template.

    The ``storage`` and ``cluster`` sections always exist and
    ``cluster.registry`` always has a value, so templates can refer to them.

    Raises TypeError if the requirements or the cluster section are not mappings.
    """
    if not isinstance(requirements, Mapping):
        raise TypeError(
            f"failed turn requirements into a map: {requirements!r} is not a mapping"
        )
    answer: dict[str, Any] = copy.deepcopy(dict(requirements))
    if answer.get("storage") is None:
        answer["storage"] = {}
    if answer.get("cluster") is None:
        answer["cluster"] = {}

    cluster = answer["cluster"]
    if not isinstance(cluster, Mapping):
        raise TypeError(f"requirements cluster section is not a mapping: {cluster!r}")
    if not isinstance(cluster, dict):
        cluster = dict(cluster)
        answer["cluster"] = cluster
    if cluster.get("registry") in (None, ""):
        cluster["registry"] = ""
    return answer


def _entry(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def auth_value(data: Mapping[str, Any] | None, user_key: str, password_key: str) -> str:
    """Return ``"user:password"`` built from two entries of a Secret's data.

    Entries may be bytes or text; a missing entry counts as empty. Returns
    ``""`` when there is no data at all.
    """
    if data is None:
        return ""
    return _entry(data, user_key) + ":" + _entry(data, password_key)


def htpasswd(username: str, password: str) -> str:
    """Return an htpasswd line ``username:<bcrypt hash>``.

    Returns ``""`` (and logs a warning) when the username is empty or holds a
    colon, when the password is empty, or when it cannot be hashed.
    """
    if not username:
        log.warning("failed to create htpasswd: no username")
        return ""
    if ":" in username:
        log.warning("invalid username: %s", username)
        return ""
    if not password:
        log.warning("failed to create htpasswd: no password for user %s", username)
        return ""
    try:
        salt = bcrypt.gensalt(rounds=DEFAULT_BCRYPT_COST, prefix=b"2a")
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    except ValueError as exc:
        log.warning("failed to create htpasswd for user %s: %s", username, exc)
        return ""
    return f"{username}:{hashed.decode('ascii')}"