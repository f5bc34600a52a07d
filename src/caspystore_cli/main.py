import functools
import os
import sys
import uuid
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text as RichText

from caspystore import __version__ as STORE_VERSION
from caspystore.core.connection import ConnectionManager
from caspystore.core.entity import generate_entity_model
from caspystore.core.mapping import SchemaMapping, load_mapping
from caspystore.core.query import Query
from caspystore.core.store import NativeObjectStore
from caspystore.utils.config import get_config
from caspystore.utils.logging import setup_logging

from . import __version__ as CLI_VERSION

"""
CaspyStore CLI - Ferramenta de linha de comando para mapeamentos e dados do CaspyStore.
"""


# --- Decorators ---
def run_safe_cli(func):
    """Decorator para tratamento seguro de erros em comandos CLI."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[bold red]Erro:[/bold red] {e}")
            raise typer.Exit(1)
    return wrapper


# --- Configuração ---
app = typer.Typer(
    help="[bold blue]CaspyStore CLI[/bold blue] - Inspecione mapeamentos e consulte dados no Cassandra.",
    rich_markup_mode="rich",
)
schema_app = typer.Typer(
    help="[bold green]Comandos para gerenciar a tabela de um mapeamento.[/bold green]",
    rich_markup_mode="rich",
)
app.add_typer(schema_app, name="schema")
console = Console()


def resolve_mapping_path(mapping_ref: str, config: Dict[str, Any]) -> str:
    """Aceita um caminho direto ou o nome de um mapeamento nos mapping_paths."""
    if os.path.exists(mapping_ref):
        return mapping_ref
    file_name = mapping_ref if mapping_ref.endswith(".toml") else f"{mapping_ref}.toml"
    for base in config.get("mapping_paths", []):
        candidate = os.path.join(base, file_name)
        if os.path.exists(candidate):
            return candidate
    console.print(f"[bold red]Erro:[/bold red] Mapeamento '{mapping_ref}' não encontrado.")
    searched = config.get("mapping_paths") or []
    console.print(f"Caminhos de busca verificados: {', '.join(searched) if searched else '(nenhum)'}")
    raise typer.Exit(1)


def _convert_value(key: str, value: str) -> Any:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered in ("none", "null"):
        return None
    try:
        if "." in value or "e" in lowered:
            return float(value)
        return int(value)
    except ValueError:
        pass
    if (key.endswith("id") or key.endswith("_id")) and len(value) == 36 and "-" in value:
        try:
            return uuid.UUID(value)
        except ValueError:
            return value
    return value


def parse_filters(filters: List[str]) -> dict:
    """Converte 'campo=valor' (com operadores campo__op) em dicionário."""
    result = {}
    for filter_str in filters:
        if "=" not in filter_str:
            raise typer.BadParameter(f"Filtro inválido '{filter_str}'. Use o formato campo=valor.")
        key, value = filter_str.split("=", 1)
        key = key.strip()
        if key.endswith("__in"):
            result[key] = [_convert_value(key, v.strip()) for v in value.split(",")]
        else:
            result[key] = _convert_value(key, value.strip())
    return result


def _load(ctx: typer.Context, mapping_ref: str) -> SchemaMapping:
    return load_mapping(resolve_mapping_path(mapping_ref, ctx.obj["config"]))


def _connect(ctx: typer.Context) -> ConnectionManager:
    config = ctx.obj["config"]
    conn = ConnectionManager()
    conn.connect(contact_points=config["hosts"], port=config["port"], keyspace=config["keyspace"])
    return conn


def _open_store(mapping: SchemaMapping, conn: ConnectionManager) -> NativeObjectStore:
    return NativeObjectStore(generate_entity_model(mapping), mapping, conn, auto_create=False)


def _render_entities(mapping: SchemaMapping, entries: List[tuple], title: str, fields: Optional[List[str]] = None):
    columns = fields or mapping.field_names
    table = Table(title=title)
    table.add_column("chave", style="bold cyan")
    for name in columns:
        table.add_column(name)
    for key, entity in entries:
        table.add_row(str(key), *[str(getattr(entity, name, "")) for name in columns])
    console.print(table)


@app.callback()
def main(
    ctx: typer.Context,
    keyspace: Optional[str] = typer.Option(
        None,
        "--keyspace",
        "-k",
        help="Keyspace a ser usado (sobrescreve CASPY_KEYSPACE e caspy.toml).",
    ),
    hosts: Optional[str] = typer.Option(
        None,
        "--hosts",
        "-H",
        help="Hosts do Cassandra separados por vírgula (sobrescreve CASPY_HOSTS e caspy.toml).",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Porta do Cassandra (sobrescreve CASPY_PORT e caspy.toml).",
    ),
):
    """Carrega a configuração e aplica as opções globais."""
    config = get_config()
    if keyspace:
        config["keyspace"] = keyspace
    if hosts:
        config["hosts"] = [h.strip() for h in hosts.split(",") if h.strip()]
    if port:
        config["port"] = port
    setup_logging(config["log_level"])
    ctx.obj = {"config": config}


@app.command("version", help="Mostra a versão da CLI.")
def version_cmd():
    console.print(f"CaspyStore CLI v{CLI_VERSION} (caspystore {STORE_VERSION})")


@app.command(help="Mostra informações sobre a CLI e a configuração.")
def info(ctx: typer.Context):
    config = ctx.obj["config"]
    info_panel = Panel(
        RichText.assemble(
            ("CaspyStore CLI", "bold blue"),
            "\n\n",
            ("Versão: ", "bold"),
            CLI_VERSION,
            "\n",
            ("Python: ", "bold"),
            f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "\n\n",
            ("Configuração:", "bold"),
            "\n",
            ("Hosts (CASPY_HOSTS): ", "bold"),
            ", ".join(config["hosts"]),
            "\n",
            ("Keyspace (CASPY_KEYSPACE): ", "bold"),
            config["keyspace"],
            "\n",
            ("Porta (CASPY_PORT): ", "bold"),
            str(config["port"]),
            "\n",
            ("Mapeamentos (CASPY_MAPPINGS_PATH/caspy.toml): ", "bold"),
            ", ".join(config["mapping_paths"]) if config["mapping_paths"] else "(Padrão)",
        ),
        title="[bold blue]CaspyStore CLI[/bold blue]",
        border_style="blue",
    )
    console.print(info_panel)


@app.command(help="Mostra os campos de um mapeamento.")
@run_safe_cli
def mapping(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(..., help="Arquivo .toml do mapeamento ou nome em mapping_paths."),
):
    schema_mapping = _load(ctx, mapping_ref)
    key_field = schema_mapping.primary_key_field()

    table = Table(title=f"Mapeamento {schema_mapping.qualified_table}")
    table.add_column("Campo", style="cyan")
    table.add_column("Coluna", style="green")
    table.add_column("Tipo", style="yellow")
    table.add_column("Chave")
    for descriptor in schema_mapping.fields:
        is_key = key_field is not None and descriptor.name == key_field.name
        table.add_row(descriptor.name, descriptor.column, descriptor.cql_type, "✓" if is_key else "")
    console.print(table)

    if key_field is None:
        console.print("[bold yellow]Aviso:[/bold yellow] nenhum campo marcado como chave primária.")


@schema_app.command("create", help="Cria a tabela do mapeamento, se não existir.")
@run_safe_cli
def schema_create(ctx: typer.Context, mapping_ref: str = typer.Argument(...)):
    schema_mapping = _load(ctx, mapping_ref)
    conn = _connect(ctx)
    try:
        NativeObjectStore(generate_entity_model(schema_mapping), schema_mapping, conn, auto_create=True)
        console.print(f"[bold green]Tabela '{schema_mapping.qualified_table}' garantida.[/bold green]")
    finally:
        conn.disconnect()


@schema_app.command("status", help="Verifica se a tabela do mapeamento existe.")
@run_safe_cli
def schema_status(ctx: typer.Context, mapping_ref: str = typer.Argument(...)):
    schema_mapping = _load(ctx, mapping_ref)
    conn = _connect(ctx)
    try:
        if _open_store(schema_mapping, conn).schema_exists():
            console.print(f"[green]Tabela '{schema_mapping.qualified_table}' existe.[/green]")
        else:
            console.print(f"[yellow]Tabela '{schema_mapping.qualified_table}' não existe.[/yellow]")
    finally:
        conn.disconnect()


@schema_app.command("drop", help="Remove a tabela do mapeamento.")
@run_safe_cli
def schema_drop(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(...),
    force: bool = typer.Option(False, "--force", help="Remover sem confirmação."),
):
    schema_mapping = _load(ctx, mapping_ref)
    if not force and not Confirm.ask(f"Remover a tabela '{schema_mapping.qualified_table}' e todos os dados?"):
        console.print("[yellow]Operação cancelada.[/yellow]")
        raise typer.Exit(0)
    conn = _connect(ctx)
    try:
        _open_store(schema_mapping, conn).delete_schema()
        console.print(f"[bold green]Tabela '{schema_mapping.qualified_table}' removida.[/bold green]")
    finally:
        conn.disconnect()


@app.command(help="Busca um objeto pela chave primária.")
@run_safe_cli
def get(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(...),
    key: str = typer.Argument(..., help="Valor da chave primária."),
    fields: List[str] = typer.Option(None, "--field", "-f", help="Campos a retornar (repetível)."),
):
    schema_mapping = _load(ctx, mapping_ref)
    key_value = _convert_value(schema_mapping.require_primary_key().name, key)
    conn = _connect(ctx)
    try:
        store = _open_store(schema_mapping, conn)
        obj = store.get(key_value, fields or None)
        if obj is None:
            console.print(f"[yellow]Nenhum objeto encontrado para a chave {key_value!r}.[/yellow]")
            raise typer.Exit(1)
        _render_entities(schema_mapping, [(key_value, obj)], schema_mapping.qualified_table, fields or None)
    finally:
        conn.disconnect()


@app.command(
    help="Consulta objetos por filtros.\n\nOperadores suportados nos filtros:\n- __gt, __gte, __lt, __lte, __in, __contains\nExemplo: --filter idade__gt=30 --filter nome__in=joao,maria"
)
@run_safe_cli
def query(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(...),
    filters: List[str] = typer.Option(None, "--filter", help="Filtros no formato 'campo=valor'."),
    fields: List[str] = typer.Option(None, "--field", "-f", help="Campos a retornar (repetível)."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limitar número de resultados."),
    allow_filtering: bool = typer.Option(False, "--allow-filtering", help="Adicionar ALLOW FILTERING."),
):
    schema_mapping = _load(ctx, mapping_ref)
    q = Query().filter(**parse_filters(filters or []))
    if fields:
        q = q.only(*fields)
    if limit:
        q = q.limit(limit)
    if allow_filtering:
        q = q.allow_filtering()

    conn = _connect(ctx)
    try:
        result = _open_store(schema_mapping, conn).execute(q)
        if not result:
            console.print("[yellow]Nenhum resultado encontrado.[/yellow]")
            return
        _render_entities(schema_mapping, result.items(), f"{schema_mapping.qualified_table} ({len(result)})", fields or None)
    finally:
        conn.disconnect()


@app.command(help="Remove objetos que correspondem aos filtros.")
@run_safe_cli
def delete(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(...),
    filters: List[str] = typer.Option(None, "--filter", help="Filtros no formato 'campo=valor'."),
    force: bool = typer.Option(False, "--force", help="Remover sem confirmação."),
):
    if not filters:
        console.print("[bold red]Erro:[/bold red] Deleção sem filtros não é permitida.")
        raise typer.Exit(1)
    schema_mapping = _load(ctx, mapping_ref)
    q = Query().filter(**parse_filters(filters))
    if not force and not Confirm.ask(f"Remover objetos de '{schema_mapping.qualified_table}' com {q.filters}?"):
        console.print("[yellow]Operação cancelada.[/yellow]")
        raise typer.Exit(0)

    conn = _connect(ctx)
    try:
        outcome = _open_store(schema_mapping, conn).delete_by_query(q)
        if outcome.success:
            console.print("[bold green]Deleção executada[/bold green] (quantidade de linhas removidas desconhecida).")
    finally:
        conn.disconnect()


@app.command(help="Atualiza objetos que correspondem aos filtros.")
@run_safe_cli
def update(
    ctx: typer.Context,
    mapping_ref: str = typer.Argument(...),
    filters: List[str] = typer.Option(None, "--filter", help="Filtros no formato 'campo=valor'."),
    assignments: List[str] = typer.Option(None, "--set", help="Atribuições no formato 'campo=valor'."),
):
    if not assignments:
        console.print("[bold red]Erro:[/bold red] Informe ao menos um --set campo=valor.")
        raise typer.Exit(1)
    schema_mapping = _load(ctx, mapping_ref)
    q = Query().filter(**parse_filters(filters or [])).set(**parse_filters(assignments))

    conn = _connect(ctx)
    try:
        if _open_store(schema_mapping, conn).update_by_query(q):
            console.print("[bold green]Update aplicado.[/bold green]")
        else:
            console.print("[bold yellow]Update não aplicado.[/bold yellow]")
            raise typer.Exit(1)
    finally:
        conn.disconnect()


if __name__ == "__main__":
    app()
