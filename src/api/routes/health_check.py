from fastapi import APIRouter, Depends

from src.app.services.log_writer import LogWriter
from src.depends import get_log_writer

router = APIRouter()


@router.get("/health")
async def health_check(log_writer: LogWriter = Depends(get_log_writer)):
    return {"status": "ok", "droppedLogs": log_writer.dropped_count}
