from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> dict[str, Any]:
    data = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {path}"
        raise ValueError(msg)
    return data


def dump_json_bytes(payload: Any, *, indent: bool = True) -> bytes:
    option = orjson.OPT_INDENT_2 if indent else 0
    try:
        return orjson.dumps(payload, option=option)
    except TypeError:
        # orjson rejects non-str keys and ints beyond 64 bits.
        return json.dumps(payload, ensure_ascii=True, indent=2 if indent else None).encode("utf-8")


def write_bytes_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(path)


def write_json_atomic(path: Path, payload: Any) -> None:
    write_bytes_atomic(path, dump_json_bytes(payload))
