import asyncio

import pytest
from fastapi.testclient import TestClient

from config import Settings
from helpers import SECRET
from main import create_app
from models.endpoint import CommandSpec, EndpointConfig


@pytest.fixture
def endpoints(tmp_path):
    return {
        "/hooks/site": EndpointConfig(
            repo_name="site",
            secret=SECRET,
            command="touch",
            args=[str(tmp_path / "a")],
            refs={"refs/heads/dev": CommandSpec(command="touch", args=[str(tmp_path / "dev")])},
        ),
        "/hooks/open": EndpointConfig(repo_name="open"),
    }


@pytest.fixture
def settings():
    return Settings(queue_size=2, command_timeout=5)


@pytest.fixture
def app(endpoints, settings):
    # No executor: queued jobs stay put so tests can inspect them.
    return create_app(endpoints, settings, start_executor=False)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def job_queue(app):
    return app.state.job_queue


@pytest.fixture
def drain(job_queue):
    """Pop every queued job, oldest first."""

    def _drain():
        jobs = []
        while len(job_queue):
            jobs.append(asyncio.run(job_queue.get()))
        return jobs

    return _drain
