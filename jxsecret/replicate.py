"""Replicate ExternalSecret resources into other Environment namespaces."""

from __future__ import annotations

import argparse
import copy
import logging
import os
import re
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

REPLICA_ANNOTATION = "secret.jenkins-x.io/replica"
REPLICATE_TO_ANNOTATION = "secret.jenkins-x.io/replicate-to"
DEFAULT_NAMESPACE = "jx"
ENVIRONMENT_KIND_PERMANENT = "Permanent"

_EQUALITY_TERM = re.compile(r"^([^\s!=(),]+)\s*(?:==|=)\s*([^\s!=(),]*)$")
_INEQUALITY_TERM = re.compile(r"^([^\s!=(),]+)\s*!=\s*([^\s!=(),]*)$")
_SET_TERM = re.compile(r"^([^\s!=(),]+)\s+(?:in|notin)\s+\(([^()]*)\)$")
_EXISTS_TERM = re.compile(r"^!?([^\s!=(),]+)$")


class ReplicateError(Exception):
    """Raised when ExternalSecrets cannot be replicated."""


class MissingOptionError(ReplicateError):
    """Raised when a required option has not been given."""

    def __init__(self, option: str) -> None:
        super().__init__(f"missing option: --{option}")
        self.option = option


def _split_selector_terms(selector: str) -> Iterator[str]:
    depth = 0
    current: list[str] = []
    for char in selector:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ReplicateError(f"failed to parse selector {selector}: unbalanced parentheses")
        if char == "," and depth == 0:
            yield "".join(current).strip()
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise ReplicateError(f"failed to parse selector {selector}: unbalanced parentheses")
    yield "".join(current).strip()


def parse_match_labels(selector: str) -> dict[str, str]:
    """Return the equality labels of a label selector.

    Set based and inequality terms are accepted but not used for matching.
    Raises ReplicateError if the selector cannot be parsed.
    """
    labels: dict[str, str] = {}
    if not selector.strip():
        return labels
    for term in _split_selector_terms(selector):
        match = _EQUALITY_TERM.match(term)
        if match:
            labels[match.group(1)] = match.group(2)
            continue
        if _INEQUALITY_TERM.match(term) or _SET_TERM.match(term) or _EXISTS_TERM.match(term):
            continue
        raise ReplicateError(f"failed to parse selector {selector}: invalid term {term!r}")
    return labels


def _metadata(document: dict[str, Any]) -> dict[str, Any]:
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
        document["metadata"] = metadata
    return metadata


def _set_annotation(document: dict[str, Any], key: str, value: str) -> None:
    metadata = _metadata(document)
    annotations = metadata.get("annotations")
    if not isinstance(annotations, dict):
        annotations = {}
        metadata["annotations"] = annotations
    annotations[key] = value


def _read_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ReplicateError(f"failed to parse YAML file {path}: {exc}") from exc


def _write_yaml(document: dict[str, Any], path: Path) -> None:
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")


def _yaml_files(directory: Path) -> Iterator[Path]:
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if name.endswith((".yaml", ".yml")):
                yield Path(root) / name


@dataclass
class _Filter:
    kinds: list[str]
    names: list[str] = field(default_factory=list)
    selector: dict[str, str] = field(default_factory=dict)

    def matches(self, document: dict[str, Any]) -> bool:
        if self.kinds and document.get("kind") not in self.kinds:
            return False
        metadata = document.get("metadata") or {}
        if self.names and metadata.get("name") not in self.names:
            return False
        if self.selector:
            labels = metadata.get("labels") or {}
            return all(labels.get(k) == v for k, v in self.selector.items())
        return True


def _visit(
    directory: Path, visitor: Callable[[dict[str, Any], Path], None], match: _Filter
) -> None:
    for path in _yaml_files(directory):
        document = _read_yaml(path)
        if isinstance(document, dict) and match.matches(document):
            visitor(document, path)


@dataclass
class ReplicateOptions:
    """Options for replicating ExternalSecrets to other namespaces."""

    file: str = "t"
    dir: str = ""
    output_dir: str = ""
    namespaces_dir: str = ""
    from_namespace: str = ""
    selector: str = ""
    names: list[str] = field(default_factory=list)
    to: list[str] = field(default_factory=list)
    batch_mode: bool = False
    verbose: bool = False

    def run(self) -> None:
        """Replicate the selected ExternalSecrets into the target namespaces."""
        if not self.file:
            raise MissingOptionError("file")
        if not self.names and not self.selector:
            raise MissingOptionError("name")
        if not self.from_namespace:
            self.from_namespace = DEFAULT_NAMESPACE
        if not self.output_dir:
            self.output_dir = os.path.join(self.dir, "config-root")
        if not self.namespaces_dir:
            self.namespaces_dir = os.path.join(self.output_dir, "namespaces")
        source_dir = Path(self.namespaces_dir) / self.from_namespace

        if not self.to:
            self._discover_environment_namespaces(source_dir)
            if not self.to:
                log.warning("no --to specified and no remote Environments found")
                return

        match = _Filter(kinds=["ExternalSecret"], names=list(self.names))
        if self.selector:
            match.selector = parse_match_labels(self.selector)

        found: set[str] = set()

        def replicate(document: dict[str, Any], path: Path) -> None:
            name = str((document.get("metadata") or {}).get("name", ""))
            found.add(name)
            rel_path = path.relative_to(source_dir)
            for namespace in self.to:
                replica = copy.deepcopy(document)
                _metadata(replica)["namespace"] = namespace
                _set_annotation(replica, REPLICA_ANNOTATION, "true")

                out_file = Path(self.namespaces_dir) / namespace / rel_path
                try:
                    out_file.parent.mkdir(parents=True, exist_ok=True)
                    _write_yaml(replica, out_file)
                except OSError as exc:
                    raise ReplicateError(
                        f"failed to write ExternalSecret {namespace}/{name} to file {out_file}: {exc}"
                    ) from exc
                log.debug("replicated ExternalSecret %s/%s to %s", namespace, name, out_file)
            self._add_replicated_local_backend_annotation(path)

        _visit(source_dir, replicate, match)

        for name in self.names:
            if name not in found:
                log.warning(
                    "could not find ExternalSecret %s in namespace %s", name, self.from_namespace
                )

    def _add_replicated_local_backend_annotation(self, path: Path) -> None:
        document = _read_yaml(path)
        if not isinstance(document, dict):
            return
        spec = document.get("spec")
        if not isinstance(spec, dict) or spec.get("backendType") is None:
            return
        backend_type = str(spec["backendType"]).strip()
        if backend_type != "local":
            log.debug("ignoring backend type %s", backend_type)
            return
        _set_annotation(document, REPLICATE_TO_ANNOTATION, ",".join(self.to))
        try:
            _write_yaml(document, path)
        except OSError as exc:
            raise ReplicateError(f"failed to save file {path}: {exc}") from exc

    def _discover_environment_namespaces(self, directory: Path) -> None:
        def collect(document: dict[str, Any], path: Path) -> None:
            spec = document.get("spec") or {}
            if not isinstance(spec, dict) or spec.get("kind") != ENVIRONMENT_KIND_PERMANENT:
                return
            namespace = spec.get("namespace") or ""
            if namespace and namespace not in self.to:
                self.to.append(str(namespace))

        _visit(directory, collect, _Filter(kinds=["Environment"]))


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="replicate",
        description="Replicates the given ExternalSecret resources into other Environments or Namespaces",
    )
    parser.add_argument("-b", "--batch-mode", action="store_true", help="runs in batch mode without prompting for user input")
    parser.add_argument("--verbose", action="store_true", help="enables verbose output")
    parser.add_argument("-f", "--file", default="t", help="the ExternalSecret to replicate")
    parser.add_argument("-s", "--selector", default="", help="defines the label selector to find the ExternalSecret resources to replicate")
    parser.add_argument("-n", "--name", action="append", default=[], dest="names", help="specifies the names of the ExternalSecrets to replicate if not using a selector")
    parser.add_argument("--from", default="", dest="from_namespace", help="the Namespace to replicate the ExternalSecret from")
    parser.add_argument("-t", "--to", action="append", default=[], help="one or more Namespaces to replicate the ExternalSecret to")
    parser.add_argument("-o", "--output-dir", default="", help="the output directory which defaults to 'config-root' in the directory")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the replicate command with the given arguments."""
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    options = ReplicateOptions(
        file=args.file,
        output_dir=args.output_dir,
        from_namespace=args.from_namespace,
        selector=args.selector,
        names=list(args.names),
        to=list(args.to),
        batch_mode=args.batch_mode,
        verbose=args.verbose,
    )
    try:
        options.run()
    except ReplicateError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())