"""
Persists the addresses of a deployment as the constants module consumed by the client.

Two renderings of the same field set are supported, chosen by the artifact's suffix:
a TypeScript module (`.ts`) and a JSON document (`.json`). Both are fully deterministic
so that redeploying to the same network produces diff-minimal artifacts.
"""

import json
import os
import re
import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, List, Tuple

from dfdeploy.components import COMPONENTS, LIBRARIES
from dfdeploy.exceptions import PersistenceError
from dfdeploy.networks import NetworkMeta
from dfdeploy.registry import AddressRegistry

STANDARD_ARTIFACT_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}

NETWORK_FIELDS = ("NETWORK", "NETWORK_ID", "START_BLOCK")
LIBRARY_FIELDS = tuple(spec.artifact_field for spec in LIBRARIES)
CONTRACT_FIELDS = tuple(
    spec.artifact_field for spec in COMPONENTS.values() if spec not in LIBRARIES
)

SECTIONS = (
    ("Network information", NETWORK_FIELDS),
    ("Library addresses", LIBRARY_FIELDS),
    ("Contract addresses", CONTRACT_FIELDS),
)

_TS_CONSTANT = re.compile(r"^export const (\w+) = (.+);$")

Field = Tuple[str, Any]


def artifact_fields(registry: AddressRegistry, network: NetworkMeta) -> List[Field]:
    """Returns every artifact field, in their persisted order."""
    missing = [name for name in COMPONENTS if name not in registry]
    if missing:
        raise ValueError(f"Registry is missing component(s): {', '.join(missing)}")

    values = {
        "NETWORK": network.name,
        "NETWORK_ID": int(network.chain_id),
        "START_BLOCK": int(network.start_block),
    }
    for name, spec in COMPONENTS.items():
        values[spec.artifact_field] = registry[name].address

    return [(field, values[field]) for _, fields in SECTIONS for field in fields]


def render_typescript(fields: List[Field]) -> str:
    values = dict(fields)
    lines = list()
    for title, section_fields in SECTIONS:
        lines.extend(["/**", f" * {title}", " */"])
        for field in section_fields:
            value = values[field]
            literal = str(value) if isinstance(value, int) else f"'{value}'"
            lines.append(f"export const {field} = {literal};")
    return "\n".join(lines) + "\n"


def render_json(fields: List[Field]) -> str:
    return json.dumps(OrderedDict(fields), **STANDARD_ARTIFACT_JSON_FORMAT) + "\n"


RENDERERS = {
    ".ts": render_typescript,
    ".json": render_json,
}


class ArtifactWriter:
    def __init__(self, filepath: Path):
        self.filepath = Path(filepath)
        if self.filepath.suffix not in RENDERERS:
            raise ValueError(
                f"Unsupported artifact format '{self.filepath.suffix}', "
                f"expected one of {', '.join(RENDERERS)}"
            )
        self._render = RENDERERS[self.filepath.suffix]

    def render(self, registry: AddressRegistry, network: NetworkMeta) -> str:
        try:
            fields = artifact_fields(registry, network)
        except ValueError as e:
            raise PersistenceError(self.filepath, e) from e
        return self._render(fields)

    def write(self, registry: AddressRegistry, network: NetworkMeta) -> Path:
        """Replaces the artifact with the contents of the registry."""
        contents = self.render(registry, network)
        temp_filepath = self.filepath.with_name(f".{self.filepath.name}.tmp")
        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_filepath, "w") as file:
                file.write(contents)
            os.replace(temp_filepath, self.filepath)
        except OSError as e:
            raise PersistenceError(self.filepath, e) from e
        print(f"(i) Artifact written to {self.filepath}!")
        return self.filepath


def _parse_typescript(text: str) -> "typing.OrderedDict[str, Any]":
    data = OrderedDict()
    for line in text.splitlines():
        match = _TS_CONSTANT.match(line.strip())
        if not match:
            continue
        name, literal = match.groups()
        if literal.startswith("'") and literal.endswith("'"):
            data[name] = literal[1:-1]
        else:
            data[name] = int(literal)
    return data


def read_artifact(filepath: Path) -> "typing.OrderedDict[str, Any]":
    """Reads back a persisted artifact as an ordered mapping of field to value."""
    filepath = Path(filepath)
    with open(filepath, "r") as file:
        text = file.read()
    if filepath.suffix == ".json":
        return json.loads(text, object_pairs_hook=OrderedDict)
    if filepath.suffix == ".ts":
        return _parse_typescript(text)
    raise ValueError(f"Unsupported artifact format '{filepath.suffix}'")
