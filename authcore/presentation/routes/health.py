from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request) -> dict:
    store = getattr(request.app.state, "kv_store", None)
    redis_ok = await store.ping() if store is not None else False
    return {"status": "ok", "services": {"redis": "healthy" if redis_ok else "unavailable"}}
