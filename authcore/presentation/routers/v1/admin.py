from typing import Annotated

from fastapi import APIRouter, Depends

from authcore.application.token_manager import TokenLifecycleManager
from authcore.domain.entities import Identity
from authcore.presentation.dependencies import get_token_manager, require_admin
from authcore.schemas.responses import Envelope, success

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.delete("/identities/{identity_id}/session", response_model=Envelope)
async def delete_identity_session(
    identity_id: str,
    _admin: Annotated[Identity, Depends(require_admin)],
    tokens: Annotated[TokenLifecycleManager, Depends(get_token_manager)],
):
    await tokens.revoke(identity_id)
    return success("Session revoked")
