"""core — Window shell, shared state, configuration and persistence.

Making `core` an explicit package so imports like `import core.store`
work when running `main.py` from the project root.
"""

__all__ = ["app", "scene", "store", "data", "tuning", "geo", "save",
           "bootstrap", "constants"]
