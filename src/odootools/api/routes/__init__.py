from . import access, health, modules, query, translations

__all__ = ["access", "health", "modules", "query", "translations"]
