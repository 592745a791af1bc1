"""status-transformer - derive composite conditions and events from resource status conditions."""

__version__ = "0.1.0"
