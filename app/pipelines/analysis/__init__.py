"""Media analysis pipeline package.

Modules are organised by the order in which `/analyze` and `/analyze-audio`
execute:

1. `ingestion` – validate the upload and read its bytes.
2. `orchestrator` – materialize the file, hand it to the backend adapter,
   collect the result and release every scratch artifact.

The backend adapters, result poller and scratch storage live in
`app.services`; this package only ties them together per request.
"""

from .ingestion import read_upload, resolve_extension
from .orchestrator import AnalysisOrchestrator, get_orchestrator

__all__ = [
    "AnalysisOrchestrator",
    "get_orchestrator",
    "read_upload",
    "resolve_extension",
]
