from .loader import load_domain_registry, select_categories

__all__ = ["load_domain_registry", "select_categories"]
