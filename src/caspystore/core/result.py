# caspystore/core/result.py

from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from .query import Query


class DeleteByQueryResult(NamedTuple):
    """
    Resultado de ``delete_by_query``.

    O Cassandra não informa quantas linhas um DELETE removeu, então ``count``
    é sempre ``None`` ("desconhecido"); nunca um número inventado.
    """
    success: bool
    count: Optional[int] = None

    @property
    def count_known(self) -> bool:
        return self.count is not None


class KeyedResult:
    """
    Resultado de ``execute``: pares chave -> entidade na ordem do cursor.

    Chaves repetidas mantêm a posição da primeira ocorrência e o valor da
    última, como um dicionário.
    """
    def __init__(self, query: Optional[Query] = None):
        self.query = query
        self._entries: Dict[Any, Any] = {}
        self._position = 0
        self._snapshot: Optional[List[Tuple[Any, Any]]] = None

    def add(self, key: Any, entity: Any) -> None:
        self._entries[key] = entity
        self._snapshot = None

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return iter(self._entries.items())

    def __contains__(self, key: Any) -> bool:
        return key in self._entries

    def __getitem__(self, key: Any) -> Any:
        return self._entries[key]

    def __repr__(self) -> str:
        return f"<KeyedResult size={len(self._entries)} keys={list(self._entries)}>"

    def get(self, key: Any, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def keys(self) -> List[Any]:
        return list(self._entries.keys())

    def values(self) -> List[Any]:
        return list(self._entries.values())

    def items(self) -> List[Tuple[Any, Any]]:
        return list(self._entries.items())

    # --- Consumo incremental ---

    def next(self) -> Optional[Tuple[Any, Any]]:
        """Retorna o próximo par ainda não consumido, ou None ao final."""
        if self._snapshot is None:
            self._snapshot = self.items()
        items = self._snapshot
        if self._position >= len(items):
            return None
        entry = items[self._position]
        self._position += 1
        return entry

    @property
    def progress(self) -> float:
        """Fração dos resultados já consumidos por ``next()``."""
        if not self._entries:
            return 1.0
        return self._position / len(self._entries)
