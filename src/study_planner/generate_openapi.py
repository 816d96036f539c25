"""
Dump the planner API's OpenAPI document to disk.

Clients and docs tooling read interfaces/openapi.json instead of starting
the server. Tags declared in main.openapi_tags are merged into the schema
even when no route uses them yet.

    study-planner-openapi [output_dir]
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .main import app, openapi_tags

logger = logging.getLogger(__name__)


def _merge_tags(schema: Dict[str, Any]) -> None:
    """Append tag metadata for any declared tag the generated schema lacks."""
    tags: List[Dict[str, Any]] = list(schema.get("tags") or [])
    known = {t.get("name") for t in tags if isinstance(t, dict)}
    tags.extend(t for t in openapi_tags if t["name"] not in known)
    if tags:
        schema["tags"] = tags


# PUBLIC_INTERFACE
def generate_openapi(output_dir: Optional[str] = None) -> str:
    """Write the OpenAPI schema to ``<output_dir>/openapi.json`` and return the written path."""
    schema = app.openapi()
    _merge_tags(schema)

    interfaces_dir = output_dir or os.path.join(os.getcwd(), "interfaces")
    os.makedirs(interfaces_dir, exist_ok=True)
    out_path = os.path.join(interfaces_dir, "openapi.json")

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", out_path)
    return out_path


def main() -> None:
    generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
