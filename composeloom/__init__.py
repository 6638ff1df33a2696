"""composeloom: migrate Vue Options-API components to the Composition API."""

__version__ = "0.1.0"
