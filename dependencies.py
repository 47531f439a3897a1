# dependencies.py

from fastapi import Request

from job_queue import JobQueue


def get_job_queue(request: Request) -> JobQueue:
    return request.app.state.job_queue
