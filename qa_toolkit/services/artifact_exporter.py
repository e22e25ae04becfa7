"""Client-side downloads for generated artifacts.

Artifacts are delivered as base64 `data:` URLs placed on `<a download>` links,
so the browser saves the file without another request to the backend.
"""
from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import List

MARKDOWN_MIME = "text/markdown"
TEXT_MIME = "text/plain"
JSON_MIME = "application/json"
JAVASCRIPT_MIME = "application/javascript"


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content: str
    mime_type: str

    @property
    def label(self) -> str:
        _, dot, extension = self.filename.rpartition(".")
        return f"Export .{extension}" if dot else "Export"

    def to_bytes(self) -> bytes:
        return self.content.encode("utf-8", "replace")

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.to_bytes()).decode("ascii")
        return f"data:{self.mime_type};charset=utf-8;base64,{encoded}"


def export_artifact(filename: str, content: str, mime_type: str) -> ExportArtifact:
    return ExportArtifact(
        filename=filename,
        content="" if content is None else str(content),
        mime_type=mime_type or "application/octet-stream",
    )


def result_exports(result: str) -> List[ExportArtifact]:
    return [
        export_artifact("test-output.md", result, MARKDOWN_MIME),
        export_artifact("test-output.txt", result, TEXT_MIME),
        export_artifact(
            "test-output.json",
            json.dumps({"output": result}, indent=2, ensure_ascii=False),
            JSON_MIME,
        ),
    ]


def postman_script_exports(script: str) -> List[ExportArtifact]:
    return [export_artifact("postman-test.js", script, JAVASCRIPT_MIME)]
