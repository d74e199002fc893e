"""Default secret values read from the Secret files generated by helm."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)


def _load_secret_values(path: Path) -> dict[str, str]:
    """Load the ``data`` and ``stringData`` entries of a Secret YAML file."""
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse Secret file {path}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"failed to parse Secret file {path}: not a mapping")

    values: dict[str, str] = {}
    data: Any = document.get("data") or {}
    string_data: Any = document.get("stringData") or {}
    if not isinstance(data, dict) or not isinstance(string_data, dict):
        raise ValueError(f"failed to parse Secret file {path}: data must be a mapping")

    for key, encoded in data.items():
        try:
            raw = base64.b64decode(str(encoded or ""), validate=True)
        except binascii.Error as exc:
            raise ValueError(
                f"failed to parse Secret file {path}: entry {key} is not base64"
            ) from exc
        values[str(key)] = raw.decode("utf-8", errors="replace")
    for key, value in string_data.items():
        values[str(key)] = "" if value is None else str(value)
    return values


@dataclass
class HelmSecretCache:
    """Looks up default secret values from a folder of helm generated Secrets.

    The folder holds one directory per namespace and a ``<name>.yaml`` Secret
    file for each secret. Each file is read at most once.
    """

    folder: str | Path = ""
    disable_secret_folder: bool = False
    values: dict[str, dict[str, str]] = field(default_factory=dict)

    def value(self, namespace: str, name: str, entry_name: str) -> str:
        """Return the value of ``entry_name`` in Secret ``namespace/name`` or ``""``.

        Raises ValueError if the Secret file exists but cannot be parsed.
        """
        key = f"{namespace}/{name}"
        entries = self.values.get(key)
        if entries is None and not self.disable_secret_folder:
            path = Path(self.folder) / namespace / f"{name}.yaml"

            # remember an empty result so the file is not looked up again
            self.values[key] = {}

            if not path.is_file():
                log.warning(
                    "no helm secrets file %s exists so cannot default the external secret store data",
                    path,
                )
                return ""

            entries = _load_secret_values(path)
            self.values[key] = entries
        if not entries:
            return ""
        return entries.get(entry_name, "")