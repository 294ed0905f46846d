"""
tsmerge.utils – Small shared utilities (output naming).
"""
from .naming import has_prefix_marker, output_name, prefixed_extension, source_map_name

__all__ = ["has_prefix_marker", "output_name", "prefixed_extension", "source_map_name"]
