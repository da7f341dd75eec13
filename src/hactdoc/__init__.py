"""HactDoc - C++ documentation extraction into a scoped hierarchy."""

try:
    from importlib.metadata import version

    __version__ = version("hactdoc")
except Exception:
    __version__ = "0.0.0.dev0+local"  # Fallback for development
