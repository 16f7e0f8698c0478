"""FastAPI application factory and routing definitions."""

from __future__ import annotations

import secrets
from typing import Any, Callable

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Response, status
from loguru import logger
from pydantic import BaseModel, Field

from docsys.assistant import AssistantService
from docsys.config.app import AppConfig
from docsys.config.web import WebAuthConfig
from docsys.documents import pages
from docsys.documents.models import Document
from docsys.editor import EditorSession
from docsys.errors import AccessDeniedError, ExportError, ShareDecodeError
from docsys.export import export_document
from docsys.listing import list_entries, unlock
from docsys.sharing import IMPORT_FAILED_NOTICE, ImportBridge, codec
from docsys.storage.store import DocumentStore

PASSWORD_HEADER = "X-Document-Password"


class DocumentUpdate(BaseModel):
    title: str | None = None
    content: list[str] | None = Field(None, description="Pages in reading order")
    markup: str | None = Field(None, description="Joined editor markup, split on page breaks")


class PasswordChange(BaseModel):
    password: str
    confirm: str


class ShareImport(BaseModel):
    token: str


def create_app(store: DocumentStore, config: AppConfig | None = None) -> FastAPI:
    """Create the document API around an already loaded store."""

    config = config or AppConfig()
    web_config = config.web
    auth_dependency = _build_auth_dependency(web_config.auth if web_config else None)
    assistant = AssistantService(config.assistant)

    app = FastAPI(
        title=web_config.title if web_config else "docsys",
        description="Local-first document store with password gating and share links.",
        version="0.1.0",
    )
    router = APIRouter(dependencies=[Depends(auth_dependency)])

    def _unlocked(doc_id: str, password: str | None) -> Document:
        try:
            doc = unlock(store, doc_id, password)
        except AccessDeniedError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
        if doc is None:
            raise HTTPException(status_code=404, detail=f"Document '{doc_id}' not found.")
        return doc

    def _session(doc_id: str, password: str | None) -> EditorSession:
        return EditorSession(store, _unlocked(doc_id, password))

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, Any]:
        """Check if the API is running."""
        return {"status": "ok", "documents": len(store), "assistant": assistant.is_configured()}

    @router.get("/documents", summary="List documents", tags=["Documents"])
    async def list_documents() -> list[dict[str, Any]]:
        """Documents ordered by last update, without their content."""
        return [entry.as_dict() for entry in list_entries(store)]

    @router.post("/documents", status_code=status.HTTP_201_CREATED, tags=["Documents"])
    async def create_document() -> dict[str, Any]:
        return _document_payload(store.create())

    @router.get("/documents/{doc_id}", tags=["Documents"])
    async def get_document(
        doc_id: str,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> dict[str, Any]:
        return _document_payload(_unlocked(doc_id, password))

    @router.put("/documents/{doc_id}", tags=["Documents"])
    async def update_document(
        doc_id: str,
        body: DocumentUpdate,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> dict[str, Any]:
        session = _session(doc_id, password)
        if body.title is not None:
            session.set_title(body.title)
        markup = body.markup
        if body.content is not None:
            markup = pages.join(body.content)
        session.flush(markup, force=True)
        return _document_payload(session.document)

    @router.delete("/documents/{doc_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Documents"])
    async def delete_document(doc_id: str) -> Response:
        if not store.delete(doc_id):
            raise HTTPException(status_code=404, detail=f"Document '{doc_id}' not found.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.put("/documents/{doc_id}/password", tags=["Protection"])
    async def set_password(
        doc_id: str,
        body: PasswordChange,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> dict[str, Any]:
        session = _session(doc_id, password)
        error = session.set_password(body.password, body.confirm)
        if error is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
        return _document_payload(session.document)

    @router.delete("/documents/{doc_id}/password", tags=["Protection"])
    async def remove_password(
        doc_id: str,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> dict[str, Any]:
        session = _session(doc_id, password)
        session.remove_password()
        return _document_payload(session.document)

    @router.post("/documents/{doc_id}/share", tags=["Sharing"])
    async def share_document(
        doc_id: str,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> dict[str, str]:
        doc = _unlocked(doc_id, password)
        token = codec.encode(doc)
        return {"token": token, "link": codec.build_link(config.share.base_url, token)}

    @router.post("/share/import", status_code=status.HTTP_201_CREATED, tags=["Sharing"])
    async def import_shared(body: ShareImport) -> dict[str, Any]:
        token = codec.extract_token(body.token) or body.token
        try:
            doc = ImportBridge(store).import_token(token)
        except ShareDecodeError as exc:
            logger.warning("Rejected share token: {}", exc)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMPORT_FAILED_NOTICE) from exc
        return _document_payload(doc)

    @router.get("/documents/{doc_id}/export/{fmt}", tags=["Export"])
    async def export(
        doc_id: str,
        fmt: str,
        password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    ) -> Response:
        doc = _unlocked(doc_id, password)
        try:
            result = export_document(doc, fmt, password=password)
        except ExportError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return Response(
            content=result.data,
            media_type=result.media_type,
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )

    app.include_router(router)
    return app


def _document_payload(doc: Document) -> dict[str, Any]:
    payload = doc.to_record()
    payload.pop("password", None)
    payload["protected"] = doc.is_protected
    return payload


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Return a dependency that validates the configured auth token."""

    if not auth_config or not auth_config.enabled:
        async def _no_auth() -> None:  # pragma: no cover - trivial branch
            return None

        return _no_auth

    expected_token = auth_config.token or ""
    header_alias = auth_config.header_name

    async def _verify_token(
        provided_token: str | None = Header(default=None, alias=header_alias),
    ) -> None:
        if provided_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authentication token.",
            )

        if not secrets.compare_digest(provided_token, expected_token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token.",
            )

    return _verify_token
