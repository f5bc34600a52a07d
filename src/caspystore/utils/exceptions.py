"""
Exceções do CaspyStore.
"""


class CaspyStoreError(Exception):
    """Exceção base para todos os erros do CaspyStore."""
    pass


class ConnectionError(CaspyStoreError):
    """Falha ao conectar, ou uso da sessão antes de conectar."""
    pass


class ValidationError(CaspyStoreError):
    """Dados de entidade inválidos para a operação solicitada."""
    pass


class MappingConfigurationError(CaspyStoreError):
    """
    Erro na definição do mapeamento (ex: nenhum campo marcado como chave primária).

    É um erro de configuração, não de dados: toda leitura por query ficaria
    corrompida se ele fosse ignorado.
    """
    pass


class KeyResolutionError(MappingConfigurationError):
    """Não foi possível extrair a chave primária de uma entidade."""

    def __init__(self, field_name: str, entity_cls: type, reason: str = ""):
        self.field_name = field_name
        self.entity_cls = entity_cls
        message = f"Campo '{field_name}' não está acessível em {entity_cls.__qualname__}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MultipleResultsError(CaspyStoreError):
    """Uma busca por chave em modo estrito retornou mais de uma linha."""
    pass


class UpdateNotAppliedError(CaspyStoreError):
    """
    O Cassandra não aplicou um UPDATE condicional.

    O store nunca lança esta exceção por conta própria; ela existe para quem
    chama ``update_by_query`` e decide tratar ``False`` como erro.
    """
    pass
