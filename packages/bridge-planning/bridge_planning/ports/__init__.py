from .protocols import ComponentCatalogPort, ComponentFactoryPort, DependencyGraphPort

__all__ = ["ComponentCatalogPort", "ComponentFactoryPort", "DependencyGraphPort"]
