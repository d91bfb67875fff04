"""Render collected clients as a text summary or a JSON envelope."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from clientfinder.coordinates import ClientResultSet, ComponentVersion


def summary_line(results: ClientResultSet) -> str:
    """``Found N clients: {...}`` over all target versions."""
    body = ", ".join(
        f"{target}=[{', '.join(str(c) for c in clients)}]"
        for target, clients in results.items()
    )
    return f"Found {results.total_clients} clients: {{{body}}}"


def export_text(results: ClientResultSet) -> str:
    lines: list[str] = []
    for target, clients in results.items():
        lines.append(f"{target} ({len(clients)} clients)")
        lines.extend(f"  {client}" for client in clients)
    lines.append(summary_line(results))
    return "\n".join(lines) + "\n"


def export_json(results: ClientResultSet, target: str) -> str:
    """Export results as structured JSON, one entry per target version."""
    payload: dict[str, Any] = {
        "target": target,
        "generated_at": datetime.now(UTC).isoformat(),
        "version_count": len(results),
        "client_count": results.total_clients,
        "versions": [
            _entry_to_dict(version, clients)
            for version, clients in results.items()
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _entry_to_dict(
    version: ComponentVersion, clients: list[ComponentVersion]
) -> dict[str, Any]:
    return {
        "version": str(version),
        "client_count": len(clients),
        "clients": [str(c) for c in clients],
    }
