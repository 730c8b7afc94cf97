"""On-disk storage: file naming, sidecars and the recordings directory."""

from . import filename_codec
from .sidecar_store import SidecarStore, SidecarReadResult, sidecar_path_for
from .file_manager import RecordingsDirectory

__all__ = [
    "filename_codec",
    "SidecarStore",
    "SidecarReadResult",
    "sidecar_path_for",
    "RecordingsDirectory",
]
