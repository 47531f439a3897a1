# routers/health.py

from fastapi import APIRouter, Depends
import logging

from dependencies import get_job_queue
from job_queue import JobQueue

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Health Check Endpoint")
def health_check(job_queue: JobQueue = Depends(get_job_queue)):
    logger.debug("Health check endpoint was called.")
    return {
        "status": "OK",
        "queue": {"pending": len(job_queue), "capacity": job_queue.capacity},
    }
