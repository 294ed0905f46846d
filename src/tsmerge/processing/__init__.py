"""Public API surface for tsmerge.processing."""
__all__ = [
    "dts_processor",
    "js_processor",
    "sourcemaps",
]
