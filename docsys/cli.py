"""Command line interface for the docsys document store."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
import uvicorn
from loguru import logger

from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .documents import pages
from .documents.models import Document
from .editor import EditorSession
from .errors import AccessDeniedError, ExportError
from .export import SUPPORTED_FORMATS, export_document
from .listing import format_date, list_entries, unlock
from .sharing import ShareImportStatus, ShareLinkHandler, codec
from .storage import DocumentStore
from .web import create_app

DEFAULT_CONFIG_NAME = "docsys.toml"

_manage_logging = False


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    explicit_config: bool = False
    _config: AppConfig | None = None
    _store: DocumentStore | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if self.config_path.exists() or self.explicit_config:
                logger.info("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
            else:
                logger.debug("No configuration at {}; using defaults", self.config_path)
                self._config = AppConfig()
            _apply_logging_level(self._config.logging_level)
        return self._config

    def ensure_store(self) -> DocumentStore:
        if self._store is None:
            config = self.ensure_config()
            storage = config.storage
            if not storage.data_dir.is_absolute():
                storage = storage.model_copy(update={"data_dir": (self.config_path.parent / storage.data_dir).resolve()})
            self._store = DocumentStore.from_config(storage, import_title_prefix=config.share.title_prefix)
        return self._store


class _LoggedLocationBar:
    """Location bar stand-in for the terminal: there is no visible URL to clean."""

    def replace(self, url: str) -> None:
        logger.debug("Share location consumed; cleaned location is {}", url)


app = typer.Typer(help="Local-first document store")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _apply_logging_level(level: str) -> None:
    if not _manage_logging:
        return
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _unlock_or_exit(store: DocumentStore, doc_id: str, password: str | None) -> Document:
    try:
        doc = unlock(store, doc_id, password)
    except AccessDeniedError as exc:
        logger.error("{} (document {})", exc, doc_id)
        raise typer.Exit(1) from exc
    if doc is None:
        logger.error("Document {} not found", doc_id)
        raise typer.Exit(1)
    return doc


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        help=f"Path to the TOML configuration file (default: ./{DEFAULT_CONFIG_NAME})",
    ),
) -> None:
    """Initialise CLI state."""

    config_path = (config or Path.cwd() / DEFAULT_CONFIG_NAME).resolve()
    ctx.obj = CLIState(config_path=config_path, explicit_config=config is not None)

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'list' or 'new'.")
        _exit(0)


@app.command("list", help="List documents, most recently updated first")
def list_documents(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text", "--format", case_sensitive=False, callback=_normalize_format, help="text or json",
    ),
) -> None:
    store = _get_state(ctx).ensure_store()
    entries = list_entries(store)

    if format == "json":
        _emit([entry.as_dict() for entry in entries])
        return

    if not entries:
        logger.info("No documents yet. Create one with 'docsys new'.")
        return
    for entry in entries:
        lock = " [locked]" if entry.is_protected else ""
        print(f"{entry.id}  {format_date(entry.updated_at)}  {entry.title}{lock}")


@app.command(help="Create a new document and print its id")
def new(
    ctx: typer.Context,
    title: str | None = typer.Option(None, help="Initial title"),
) -> None:
    store = _get_state(ctx).ensure_store()
    session = EditorSession(store, store.create())
    if title:
        session.set_title(title)
        session.flush()
    print(session.document.id)


@app.command(help="Print a document's pages")
def show(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    password: str | None = typer.Option(None, help="Password of a protected document"),
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text", "--format", case_sensitive=False, callback=_normalize_format, help="text or json",
    ),
) -> None:
    doc = _unlock_or_exit(_get_state(ctx).ensure_store(), doc_id, password)

    if format == "json":
        record = doc.to_record()
        record.pop("password", None)
        _emit(record)
        return

    print(f"# {doc.title}")
    for number, page in enumerate(doc.content, start=1):
        print(f"\n--- page {number} ---")
        print(page)


@app.command(help="Change a document's title")
def rename(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    title: str = typer.Argument(..., help="New title"),
    password: str | None = typer.Option(None, help="Password of a protected document"),
) -> None:
    store = _get_state(ctx).ensure_store()
    session = EditorSession(store, _unlock_or_exit(store, doc_id, password))
    session.set_title(title)
    session.flush()
    logger.info("Renamed document {} to {!r}", doc_id, title)


@app.command(help="Replace a document's content with markup read from a file or stdin")
def write(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    source: Path = typer.Option(Path("-"), "--file", help="Markup file with page breaks; '-' reads stdin"),
    password: str | None = typer.Option(None, help="Password of a protected document"),
) -> None:
    store = _get_state(ctx).ensure_store()
    session = EditorSession(store, _unlock_or_exit(store, doc_id, password))
    markup = sys.stdin.read() if str(source) == "-" else source.read_text(encoding="utf-8")
    status = session.flush(markup)
    logger.info("Document {}: {} ({} pages)", doc_id, status.value, pages.page_count(markup))


@app.command(help="Delete a document permanently")
def delete(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    store = _get_state(ctx).ensure_store()
    if doc_id not in store:
        logger.error("Document {} not found", doc_id)
        _exit(1)
    if not yes and not typer.confirm("Are you sure you want to delete this document?"):
        _exit(0)
    store.delete(doc_id)


@app.command(help="Protect a document with a deterrent password (not encryption)")
def protect(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    new_password: str = typer.Option(
        ..., "--new-password", prompt=True, hide_input=True, help="Password to set",
    ),
    confirm_password: str = typer.Option(
        ..., "--confirm-password", prompt=True, hide_input=True, help="Repeat the password",
    ),
    password: str | None = typer.Option(None, help="Current password, if already protected"),
) -> None:
    store = _get_state(ctx).ensure_store()
    session = EditorSession(store, _unlock_or_exit(store, doc_id, password))
    error = session.set_password(new_password, confirm_password)
    if error is not None:
        logger.error(error)
        _exit(1)
    logger.info("Document {} is now password protected", doc_id)


@app.command(help="Remove a document's password")
def unprotect(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    password: str | None = typer.Option(None, help="Current password"),
) -> None:
    store = _get_state(ctx).ensure_store()
    session = EditorSession(store, _unlock_or_exit(store, doc_id, password))
    session.remove_password()
    logger.info("Removed password from document {}", doc_id)


@app.command(help="Print a self-contained share link for a document")
def share(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    password: str | None = typer.Option(None, help="Password of a protected document"),
    base_url: str | None = typer.Option(None, help="Override the configured application location"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    doc = _unlock_or_exit(state.ensure_store(), doc_id, password)
    print(codec.build_link(base_url or config.share.base_url, codec.encode(doc)))


@app.command("import", help="Import a document from a share link or token")
def import_link(
    ctx: typer.Context,
    link: str = typer.Argument(..., help="Share link (.../#/share/<token>) or bare token"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Import without asking"),
) -> None:
    store = _get_state(ctx).ensure_store()
    location = link if codec.extract_token(link) is not None else f"#{codec.SHARE_ROUTE}{link}"

    def _confirm(payload: codec.SharePayload) -> bool:
        if yes:
            return True
        return typer.confirm(f"Import shared document {payload.title!r}?")

    outcome = ShareLinkHandler(store, _LoggedLocationBar(), confirm=_confirm).handle(location)
    if outcome.status is ShareImportStatus.FAILED:
        logger.error(outcome.notice)
        _exit(1)
    if outcome.status is ShareImportStatus.IMPORTED and outcome.document is not None:
        print(outcome.document.id)


@app.command(help=f"Export a document ({', '.join(SUPPORTED_FORMATS)})")
def export(
    ctx: typer.Context,
    doc_id: str = typer.Argument(..., help="Document id"),
    fmt: str = typer.Argument(..., help="Export format"),
    output: Path | None = typer.Option(None, help="Output file or directory (default: current directory)"),
    password: str | None = typer.Option(None, help="Password of a protected document"),
) -> None:
    doc = _unlock_or_exit(_get_state(ctx).ensure_store(), doc_id, password)
    try:
        result = export_document(doc, fmt, password=password)
    except ExportError as exc:
        logger.error(str(exc))
        _exit(1)
        return

    target = output or Path.cwd()
    if target.is_dir():
        target = target / result.filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.data)
    logger.info("Exported document {} to {}", doc_id, target)


@app.command(help="Upgrade legacy records in the storage slot")
def migrate(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, help="Report what would change without writing"),
) -> None:
    store = _get_state(ctx).ensure_store()
    report = store.last_migration
    logger.info("Records: {}, migrations applied: {}", report.total, dict(report.applied) or "none")

    if not report.changed:
        logger.info("Storage slot is already in the current shape")
        return
    if dry_run:
        logger.info("[Dry Run] Storage slot was not rewritten.")
        return
    if not store.save():
        _exit(1)
    logger.info("Storage slot rewritten in the current shape")


@app.command(help="Show configuration and storage status")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    store = state.ensure_store()
    _report_system_status(config, store)


@app.command(help="Run the document HTTP API")
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Bind address (overrides [web].host)"),
    port: int | None = typer.Option(None, help="Port (overrides [web].port)"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    app_instance = create_app(state.ensure_store(), config)

    bind_host = host or (config.web.host if config.web else "127.0.0.1")
    bind_port = port or (config.web.port if config.web else 8000)
    logger.info("Serving document API on http://{}:{}", bind_host, bind_port)
    uvicorn.run(app_instance, host=bind_host, port=bind_port)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        _emit(result)
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            location = detail["loc"] or "<root>"
            logger.error("  - {}: {} ({})", location, detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        _emit({"fields": fields})
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=field["name"],
            type=field["type"],
            required="yes" if field["required"] else "no",
            default=default_repr,
            description=field["description"] or "(no description)",
        )


def _report_system_status(config: AppConfig, store: DocumentStore) -> None:
    """Print configuration and storage details."""
    logger.info("=== Storage ===")
    logger.info("Data dir: {}", config.storage.data_dir)
    logger.info("Storage key: {}", store.key)
    logger.info("Documents: {}", len(store))
    protected = sum(1 for doc in store if doc.is_protected)
    logger.info("Protected documents: {}", protected)
    if store.last_migration.changed:
        logger.info("Pending legacy migrations: {}", dict(store.last_migration.applied))

    logger.info("\n=== Sharing ===")
    logger.info("Base URL: {}", config.share.base_url)
    logger.info("Import title prefix: {!r}", config.share.title_prefix)

    logger.info("\n=== Assistant ===")
    if config.assistant:
        logger.info("Enabled: {}", config.assistant.enabled)
        logger.info("Model: {}", config.assistant.model)
        logger.info("Credential available: {}", config.assistant.api_key_secret is not None)
    else:
        logger.info("Not configured")

    logger.info("\n=== Web API ===")
    if config.web:
        logger.info("Bind: {}:{}", config.web.host, config.web.port)
        logger.info("Auth enabled: {}", bool(config.web.auth and config.web.auth.enabled))
    else:
        logger.info("Not configured (defaults to 127.0.0.1:8000)")


def main(argv: list[str] | None = None) -> int:
    """Entry point returning the command's exit code."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


def run() -> None:
    """Console script entry point; installs a stderr sink at the configured level."""

    global _manage_logging
    _manage_logging = True
    raise SystemExit(main())


if __name__ == "__main__":
    run()
