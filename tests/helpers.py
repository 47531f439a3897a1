"""Builders for GitHub push requests used across the test suite."""

import json
from typing import Dict, Optional

from utils import sign_payload

SECRET = "s3cret"


def push_body(ref: str = "refs/heads/main", repo: str = "site") -> bytes:
    return json.dumps({
        "ref": ref,
        "repository": {
            "name": repo,
            "full_name": f"octo/{repo}",
            "clone_url": f"https://github.com/octo/{repo}.git",
        },
        "pusher": {"name": "octocat"},
    }).encode()


def push_headers(body: bytes, secret: Optional[str] = SECRET, event: str = "push") -> Dict[str, str]:
    if secret:
        signature = sign_payload(secret.encode(), body)
    else:
        signature = "sha1=" + "0" * 40
    return {
        "X-GitHub-Event": event,
        "Content-Type": "application/json",
        "X-Hub-Signature": signature,
    }


def flip_bit(signature: str, bit: int) -> str:
    digest = signature.split("=", 1)[1]
    flipped = int(digest, 16) ^ (1 << bit)
    return f"sha1={flipped:0{len(digest)}x}"
