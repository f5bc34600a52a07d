# caspystore/core/query.py

from typing import Any, Dict, List, Optional, Tuple
from typing_extensions import Self

_NO_KEY = object()


class Query:
    """
    Descrição abstrata de uma query: projeção, predicados, limite, ordenação e,
    para UPDATE, as atribuições.

    Não executa nada sozinha; é passada ao construtor de statements pelo
    ``NativeObjectStore``. Cada método de encadeamento retorna um clone.
    """
    def __init__(self):
        self._fields: List[str] = []
        self._key: Any = _NO_KEY
        self._start_key: Any = None
        self._end_key: Any = None
        self._filters: Dict[str, Any] = {}
        self._limit: Optional[int] = None
        self._ordering: List[str] = []
        self._allow_filtering = False
        self._updates: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return (
            f"<Query fields={self._fields} key={self.key_value!r} "
            f"range=({self._start_key!r}, {self._end_key!r}) filters={self._filters} "
            f"limit={self._limit} updates={self._updates}>"
        )

    def _clone(self) -> Self:
        new_q = self.__class__()
        new_q._fields = self._fields[:]
        new_q._key = self._key
        new_q._start_key = self._start_key
        new_q._end_key = self._end_key
        new_q._filters = self._filters.copy()
        new_q._limit = self._limit
        new_q._ordering = self._ordering[:]
        new_q._allow_filtering = self._allow_filtering
        new_q._updates = self._updates.copy()
        return new_q

    # --- Encadeamento ---

    def only(self, *fields: str) -> Self:
        """Limita a projeção aos campos informados."""
        clone = self._clone()
        clone._fields = list(fields)
        return clone

    def key(self, value: Any) -> Self:
        """Restringe a query a uma única chave primária."""
        if value is None:
            raise ValueError("A chave da query não pode ser None")
        clone = self._clone()
        clone._key = value
        return clone

    def key_range(self, start: Any = None, end: Any = None) -> Self:
        """Restringe a chave primária a um intervalo fechado [start, end]."""
        clone = self._clone()
        clone._start_key = start
        clone._end_key = end
        return clone

    def filter(self, **kwargs: Any) -> Self:
        """Adiciona condições de filtro (``campo__op=valor``)."""
        clone = self._clone()
        clone._filters.update(kwargs)
        return clone

    def limit(self, count: int) -> Self:
        if count is not None and count <= 0:
            raise ValueError(f"O limite deve ser positivo, recebido: {count}")
        clone = self._clone()
        clone._limit = count
        return clone

    def order_by(self, *fields: str) -> Self:
        clone = self._clone()
        clone._ordering = list(fields)
        return clone

    def allow_filtering(self) -> Self:
        """
        Permite o uso de ALLOW FILTERING na query.
        Use com cautela, pois pode impactar o desempenho em grandes tabelas.
        """
        clone = self._clone()
        clone._allow_filtering = True
        return clone

    def set(self, **values: Any) -> Self:
        """Define atribuições para ``update_by_query``."""
        clone = self._clone()
        clone._updates.update(values)
        return clone

    # --- Leitura (usada pelo query_builder) ---

    @property
    def fields(self) -> List[str]:
        return list(self._fields)

    @property
    def has_key(self) -> bool:
        return self._key is not _NO_KEY

    @property
    def key_value(self) -> Any:
        return None if self._key is _NO_KEY else self._key

    @property
    def key_bounds(self) -> Tuple[Any, Any]:
        return self._start_key, self._end_key

    @property
    def filters(self) -> Dict[str, Any]:
        return dict(self._filters)

    @property
    def limit_value(self) -> Optional[int]:
        return self._limit

    @property
    def ordering(self) -> List[str]:
        return list(self._ordering)

    @property
    def filtering_allowed(self) -> bool:
        return self._allow_filtering

    @property
    def updates(self) -> Dict[str, Any]:
        return dict(self._updates)
