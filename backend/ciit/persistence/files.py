"""YAML/JSON document helpers for the flat-file stores."""
from __future__ import annotations
import json
import os
import re
from typing import Any

import yaml

_BOOL_TAG = "tag:yaml.org,2002:bool"


class CatalogLoader(yaml.SafeLoader):
    """
    SafeLoader with YAML 1.2 booleans.

    Only true/false (any case variant the core schema allows) load as bool;
    yes/no/on/off stay strings, so a topic named ``no`` or a color
    ``off`` is not turned into ``False``.
    """


CatalogLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CatalogLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _atomic_write(path: str, text: str) -> None:
    """Write to ``<path>.tmp`` then rename over ``path``; the temp file is removed on failure."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    temp_path = path + ".tmp"
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_path, path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise


def read_yaml(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.load(f, Loader=CatalogLoader)


def write_yaml(path: str, data: Any) -> None:
    _atomic_write(
        path,
        yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False, width=120),
    )


def read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str, data: Any) -> None:
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False))


def write_bytes(path: str, payload: bytes) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    temp_path = path + ".tmp"
    try:
        with open(temp_path, "wb") as f:
            f.write(payload)
        os.replace(temp_path, path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
