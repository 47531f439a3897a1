import asyncio

import pytest

from errors import Spillover
from job_queue import JobQueue
from models.endpoint import EndpointConfig
from models.github_webhook import PushEvent
from models.job import Job


def job(ref: str) -> Job:
    return Job(event=PushEvent(ref=ref, repository_name="site"), endpoint=EndpointConfig(repo_name="site"))


@pytest.mark.parametrize("capacity, expected", [(0, 1), (-5, 1), (1, 1), (10, 10)])
def test_capacity_is_at_least_one(capacity, expected):
    assert JobQueue(capacity).capacity == expected


def test_submit_beyond_capacity_spills_over():
    queue = JobQueue(2)
    queue.submit(job("refs/heads/a"))
    queue.submit(job("refs/heads/b"))

    with pytest.raises(Spillover):
        queue.submit(job("refs/heads/c"))
    assert len(queue) == 2


def test_fifo_order():
    async def scenario():
        queue = JobQueue(3)
        for ref in ("refs/heads/a", "refs/heads/b", "refs/heads/c"):
            queue.submit(job(ref))
        return [(await queue.get()).event.ref for _ in range(3)]

    assert asyncio.run(scenario()) == ["refs/heads/a", "refs/heads/b", "refs/heads/c"]


def test_get_waits_for_submit():
    async def scenario():
        queue = JobQueue(1)
        waiter = asyncio.create_task(queue.get())
        await asyncio.sleep(0)
        assert not waiter.done()
        queue.submit(job("refs/heads/a"))
        return await asyncio.wait_for(waiter, timeout=5)

    assert asyncio.run(scenario()).event.ref == "refs/heads/a"
