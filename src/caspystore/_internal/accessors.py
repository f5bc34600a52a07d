# caspystore/_internal/accessors.py

"""
Estratégias para ler um campo de uma entidade cujo formato só é conhecido
pelo mapeamento: método acessor (``getId``, ``get_id``), atributo direto ou
o protocolo explícito ``KeyExtractable``.

A escolha das estratégias acontece uma vez, ao vincular o tipo da entidade;
a leitura só percorre a cadeia já montada.
"""

from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

from ..utils.exceptions import KeyResolutionError


@runtime_checkable
class KeyExtractable(Protocol):
    """Entidades que sabem informar a própria chave primária."""

    def extract_key(self) -> Any:
        ...


def _normalize(name: str) -> str:
    return name.replace('_', '').lower()


def find_accessor(entity_cls: type, field_name: str) -> Optional[str]:
    """
    Procura um método chamado ``get`` + ``field_name``, sem diferenciar
    maiúsculas nem sublinhados. Com mais de um candidato vale o primeiro em
    ordem alfabética. Nomes privados e dunders (``__getstate__``) nunca contam.
    """
    wanted = 'get' + _normalize(field_name)
    for name in sorted(dir(entity_cls)):
        if name.startswith('_') or _normalize(name) != wanted:
            continue
        if callable(getattr(entity_cls, name, None)):
            return name
    return None


class ReadStrategy:
    """Uma forma de ler o valor de um campo de uma instância."""
    description = 'strategy'

    def read(self, entity: Any) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.description}>"


class AccessorStrategy(ReadStrategy):
    def __init__(self, method_name: str):
        self.method_name = method_name
        self.description = f"{method_name}()"

    def read(self, entity: Any) -> Any:
        return getattr(entity, self.method_name)()


class AttributeStrategy(ReadStrategy):
    def __init__(self, field_name: str):
        self.field_name = field_name
        self.description = field_name

    def read(self, entity: Any) -> Any:
        return getattr(entity, self.field_name)


class ExplicitKeyStrategy(ReadStrategy):
    description = 'extract_key()'

    def read(self, entity: Any) -> Any:
        return entity.extract_key()


class FieldReader:
    """
    Cadeia ordenada de estratégias para um campo. A primeira que funcionar
    vence; se todas falharem, ``KeyResolutionError`` com o campo e o tipo.
    """
    def __init__(self, entity_cls: type, field_name: str, strategies: Sequence[ReadStrategy]):
        self.entity_cls = entity_cls
        self.field_name = field_name
        self.strategies: List[ReadStrategy] = list(strategies)

    @classmethod
    def bind(cls, entity_cls: type, field_name: str) -> "FieldReader":
        """Acessor primeiro (quando o tipo tem um), atributo como fallback."""
        strategies: List[ReadStrategy] = []
        method_name = find_accessor(entity_cls, field_name)
        if method_name is not None:
            strategies.append(AccessorStrategy(method_name))
        strategies.append(AttributeStrategy(field_name))
        return cls(entity_cls, field_name, strategies)

    def read(self, entity: Any) -> Any:
        last_error: Optional[Exception] = None
        for strategy in self.strategies:
            try:
                return strategy.read(entity)
            except Exception as e:
                last_error = e
        raise KeyResolutionError(self.field_name, type(entity), str(last_error)) from last_error

    def __repr__(self) -> str:
        return f"<FieldReader {self.entity_cls.__name__}.{self.field_name} via {self.strategies}>"
