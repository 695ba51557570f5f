"""Viewer capability interface and engines."""

from .controls import SessionControls
from .headless import HeadlessViewer
from .protocol import ElementRecord, Loci, ViewerControls, ViewerEngine

__all__ = [
    "ElementRecord",
    "HeadlessViewer",
    "Loci",
    "SessionControls",
    "ViewerControls",
    "ViewerEngine",
]
