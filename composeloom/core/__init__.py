# Lazy imports to avoid loading the tree-sitter grammars on package import.
# This allows targeted imports like `from composeloom.core.config import load_settings`
# without pulling in the parsers.

__all__ = [
    "Collector",
    "Transformer",
    "migrate_source",
    "migrate_file",
    "load_settings",
    "MigrationSettings",
]

_IMPORT_MAP = {
    "Collector": ".migration",
    "Transformer": ".migration",
    "migrate_source": ".migration",
    "migrate_file": ".migration",
    "load_settings": ".config",
    "MigrationSettings": ".config",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'composeloom.core' has no attribute {name}")
