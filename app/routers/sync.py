"""
Sync Router

Manual triggers for one tick of either background job, plus the state of the
running schedulers. A trigger is refused with 409 while the same job is
already running, whether that run came from its scheduler or another trigger.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(prefix="/sync", tags=["Sync"])


async def _run_job(job, name: str) -> dict:
    if job.is_running:
        raise HTTPException(status_code=409, detail=f"{name} is already running")
    report = await job.run()
    return {
        "success": report.status == "completed",
        "report": report.to_dict(),
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.post("/metadata", summary="Run one course metadata sync")
async def run_metadata_sync(request: Request):
    return await _run_job(request.app.state.metadata_job, "Course metadata sync")


@router.post("/vector-store", summary="Run one vector store publish")
async def run_vector_publish(request: Request):
    return await _run_job(request.app.state.vector_job, "Vector store sync")


@router.get("/status", summary="Background scheduler status")
async def sync_status(request: Request):
    schedulers = getattr(request.app.state, "schedulers", [])
    return {
        "schedulers": [s.to_dict() for s in schedulers],
        "timestamp": datetime.utcnow().isoformat(),
    }
