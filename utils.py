# utils.py

import hmac
import hashlib
import logging
import re
import subprocess
from typing import List, Optional, Tuple

from fastapi import Request

from errors import CommandFailed, CommandTimeout, MalformedSignature, SignatureMismatch

logger = logging.getLogger(__name__)

SIGNATURE_PATTERN = re.compile(r"^sha1=([0-9a-fA-F]+)$")
STDERR_FD = 2


def parse_signature(header: Optional[str]) -> str:
    """
    Extract the hex digest from an ``X-Hub-Signature`` header value.

    Only the ``sha1=<hex>`` form is accepted. The digest is returned in
    lower case, the way ``hexdigest()`` renders it.
    """
    match = SIGNATURE_PATTERN.match((header or "").strip())
    if match is None:
        logger.warning(f"Malformed signature header: {header!r}")
        raise MalformedSignature()
    return match.group(1).lower()


def sign_payload(secret: bytes, body: bytes) -> str:
    mac = hmac.new(secret, msg=body, digestmod=hashlib.sha1)
    return f"sha1={mac.hexdigest()}"


async def read_signed_body(request: Request, secret: Optional[bytes]) -> Tuple[bytes, Optional[str]]:
    """
    Read the request body once, feeding every chunk to an HMAC-SHA1 as it
    arrives.

    Returns the collected body and its hex digest. The digest is None when
    no secret is configured; nothing is hashed in that case.
    """
    mac = hmac.new(secret, digestmod=hashlib.sha1) if secret else None
    body = bytearray()
    async for chunk in request.stream():
        if mac is not None:
            mac.update(chunk)
        body.extend(chunk)
    return bytes(body), mac.hexdigest() if mac is not None else None


def verify_signature(supplied: str, computed: Optional[str]) -> None:
    if computed is None:
        logger.debug("Endpoint has no secret. Skipping signature verification.")
        return

    if not hmac.compare_digest(computed, supplied):
        logger.warning(f"Signature mismatch, got {supplied!r}, want {computed!r}")
        raise SignatureMismatch()
    logger.debug("Webhook signature verified successfully.")


def run_command(argv: List[str], timeout: Optional[float] = None, verbose: bool = False):
    """
    Run ``argv`` without a shell and wait for it to finish.

    A ``timeout`` of None or 0 waits forever. On expiry the child is killed
    and CommandTimeout is raised. Output goes to our stderr when ``verbose``
    is set and is discarded otherwise.
    """
    if verbose:
        # stdout is pointed at our stderr descriptor; stderr is inherited.
        stdout, stderr = STDERR_FD, None
    else:
        stdout = stderr = subprocess.DEVNULL
    logger.debug(f"Executing command: {argv}")
    try:
        subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=stdout,
            stderr=stderr,
            timeout=timeout or None,
            check=True,
        )
    except subprocess.TimeoutExpired:
        raise CommandTimeout(argv, f"command timed out after {timeout}s")
    except subprocess.CalledProcessError as e:
        raise CommandFailed(argv, f"command exited with status {e.returncode}")
    except OSError as e:
        raise CommandFailed(argv, f"command could not be started: {e}")
    logger.debug(f"Command executed successfully: {argv}")
