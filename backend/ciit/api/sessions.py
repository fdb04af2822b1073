"""Session API: CRUD over per-session files plus summary and export."""
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ciit.api.errors import raise_for_result
from ciit.application.session_app_service import SessionAppService
from ciit.container import get_session_app_service
from ciit.domain.feedback.aggregator import summary_to_dict

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("")
def list_sessions(
    status_filter: Optional[str] = Query(None, alias="status"),
    svc: SessionAppService = Depends(get_session_app_service),
):
    result = svc.list_sessions(status=status_filter)
    raise_for_result(result)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED)
def create_session(
    body: Optional[Dict[str, Any]] = Body(None),
    svc: SessionAppService = Depends(get_session_app_service),
):
    result = svc.create_session(body or {})
    raise_for_result(result)
    return result.value


@router.get("/{session_id}")
def get_session(session_id: str, svc: SessionAppService = Depends(get_session_app_service)):
    result = svc.get_session(session_id)
    raise_for_result(result)
    return result.value


@router.put("/{session_id}")
def put_session(
    session_id: str,
    body: Dict[str, Any] = Body(...),
    svc: SessionAppService = Depends(get_session_app_service),
):
    result = svc.put_session(session_id, body)
    raise_for_result(result)
    return result.value


@router.delete("/{session_id}")
def delete_session(session_id: str, svc: SessionAppService = Depends(get_session_app_service)):
    raise_for_result(svc.delete_session(session_id))
    return {"success": True}


# ------------------------------------------------------------------
# Projections
# ------------------------------------------------------------------
@router.get("/{session_id}/summary")
def session_summary(session_id: str, svc: SessionAppService = Depends(get_session_app_service)):
    result = svc.summarize_session(session_id)
    raise_for_result(result)
    return summary_to_dict(result.value)


@router.get("/{session_id}/export")
def export_session(session_id: str, svc: SessionAppService = Depends(get_session_app_service)):
    result = svc.export_session(session_id)
    raise_for_result(result)
    filename, body = result.value
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
