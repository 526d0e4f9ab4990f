"""Certificate assets endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cemse.assets import get_certificate_logos
from cemse.auth import require
from cemse.schemas import SessionUser

router = APIRouter(prefix="/api/certificates", tags=["certificates"])


@router.get("/logos")
def certificate_logos(session: SessionUser = Depends(require("view_certificates"))):
    # sync handler: the first call reads logo files from disk
    return {"success": True, "logos": dict(get_certificate_logos())}
