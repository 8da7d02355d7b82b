"""Rendering of placement and routing state."""
from .layout_viewer import LayoutViewer

__all__ = ["LayoutViewer"]
