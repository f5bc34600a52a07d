# caspystore/core/key_resolver.py

import logging
from typing import Any

from .mapping import SchemaMapping
from .._internal.accessors import ExplicitKeyStrategy, FieldReader, KeyExtractable

logger = logging.getLogger(__name__)


class KeyResolver:
    """
    Extrai o valor da chave primária de instâncias de ``entity_cls``.

    O campo-chave é o primeiro do mapeamento marcado com ``primarykey``. Um
    mapeamento sem chave é erro de configuração e falha já na construção.
    Entidades que implementam ``KeyExtractable`` usam ``extract_key()``; as
    demais tentam o acessor ``get<Campo>`` e depois o atributo direto.
    """
    def __init__(self, entity_cls: type, mapping: SchemaMapping):
        self.entity_cls = entity_cls
        self.mapping = mapping
        self.key_field = mapping.require_primary_key().name

        if isinstance(entity_cls, type) and issubclass(entity_cls, KeyExtractable):
            self._reader = FieldReader(entity_cls, self.key_field, [ExplicitKeyStrategy()])
        else:
            self._reader = FieldReader.bind(entity_cls, self.key_field)
        logger.debug(f"Chave de {entity_cls.__name__} resolvida por {self._reader.strategies}")

    @property
    def strategies(self):
        return list(self._reader.strategies)

    def resolve(self, entity: Any) -> Any:
        return self._reader.read(entity)

    __call__ = resolve


def resolve_key(entity: Any, mapping: SchemaMapping) -> Any:
    """Atalho sem cache: vincula e resolve para uma única instância."""
    return KeyResolver(type(entity), mapping).resolve(entity)
