import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError

from dependencies import get_job_queue
from errors import (
    MalformedPayload,
    MethodNotAllowed,
    RepositoryMismatch,
    UnsupportedEvent,
    UnsupportedMediaType,
)
from job_queue import JobQueue
from models.endpoint import EndpointConfig
from models.github_webhook import PushPayload
from models.job import Job
from utils import parse_signature, read_signed_body, verify_signature

logger = logging.getLogger(__name__)

# Every method is routed to the handler so that it can answer 405 itself.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _media_type(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def endpoint_handler(url_path: str, endpoint: EndpointConfig):
    """
    Build the request handler for one configured endpoint.

    Checks run in a fixed order and the first failure decides the response:
    method, event type, content type, signature syntax, payload shape,
    signature value, repository name. Only a request passing all of them
    puts a job on the queue.

    An endpoint without a secret accepts any well-formed signature. That
    is an operator's choice made in the config file.
    """
    secret = endpoint.secret_bytes

    async def handle_webhook(
            request: Request,
            x_github_event: Optional[str] = Header(None),
            content_type: Optional[str] = Header(None),
            x_hub_signature: Optional[str] = Header(None),
            job_queue: JobQueue = Depends(get_job_queue),
    ):
        # 1. Method.
        if request.method != "POST":
            logger.warning(f"{url_path}: unsupported method {request.method}.")
            raise MethodNotAllowed()

        # 2. Event type; ping only confirms the hook is wired up.
        if x_github_event == "ping":
            logger.info(f"{url_path}: received ping event.")
            return {"message": "Ping successful."}
        if x_github_event != "push":
            logger.warning(f"{url_path}: unsupported event type {x_github_event!r}.")
            raise UnsupportedEvent()

        # 3. Content type.
        if _media_type(content_type) != "application/json":
            logger.warning(f"{url_path}: unsupported content type {content_type!r}.")
            raise UnsupportedMediaType()

        # 4. Signature syntax, required even when the endpoint has no secret.
        supplied = parse_signature(x_hub_signature)

        # 5. Payload, read once through the digest.
        body, computed = await read_signed_body(request, secret)
        try:
            payload = PushPayload.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"{url_path}: could not decode JSON payload: {e}")
            raise MalformedPayload()

        # 6. Signature value.
        verify_signature(supplied, computed)

        # 7. Repository name.
        event = payload.to_event()
        if event.repository_name != endpoint.repo_name:
            logger.warning(
                f"{url_path}: repository names mismatch, got {event.repository_name!r}, "
                f"want {endpoint.repo_name!r}."
            )
            raise RepositoryMismatch()

        job_queue.submit(Job(event=event, endpoint=endpoint))
        logger.info(f"{url_path}: accepted push for repo {endpoint.repo_name!r}, ref {event.ref!r}.")
        return {"message": f"Push for {endpoint.repo_name} on {event.ref} queued."}

    return handle_webhook


def build_router(endpoints: Dict[str, EndpointConfig]) -> APIRouter:
    router = APIRouter()
    for url_path, endpoint in endpoints.items():
        router.add_api_route(
            url_path,
            endpoint_handler(url_path, endpoint),
            methods=ALL_METHODS,
            summary=f"Webhook for {endpoint.repo_name}",
            include_in_schema=False,
        )
        logger.info(f"Registered webhook endpoint {url_path} for repository {endpoint.repo_name!r}.")
    return router
