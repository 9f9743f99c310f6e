# -*- coding: utf-8 -*-
"""
Registro de plugins de filtro por tipo de nó da IR
"""

from typing import Dict, List, Type

from ..domain.models.filters import FilterDescriptor, NodeFilter


class PluginRegistry:
    """Registry para plugins de filtro"""

    def __init__(self):
        self._filters: Dict[type, Type[NodeFilter]] = {}
        self._descriptors: Dict[type, FilterDescriptor] = {}

    def register_filter(self, descriptor: FilterDescriptor, filter_class: Type[NodeFilter]):
        """Registra um novo filtro"""
        self._filters[descriptor.node_type] = filter_class
        self._descriptors[descriptor.node_type] = descriptor

    def get_filter(self, node_type: type) -> Type[NodeFilter] | None:
        """Obtém a classe de filtro para um tipo de nó"""
        return self._filters.get(node_type)

    def get_descriptor(self, node_type: type) -> FilterDescriptor | None:
        """Obtém o descritor de um filtro"""
        return self._descriptors.get(node_type)

    def list_filters(self) -> List[FilterDescriptor]:
        """Lista todos os filtros registrados"""
        return list(self._descriptors.values())


# Instância global do registry
plugin_registry = PluginRegistry()


def node_filter(node_type: type, name: str, description: str = ""):
    """Decorator para registrar filtros"""

    def decorator(filter_class: Type[NodeFilter]):
        descriptor = FilterDescriptor(name=name, node_type=node_type, description=description)
        plugin_registry.register_filter(descriptor, filter_class)
        return filter_class

    return decorator
