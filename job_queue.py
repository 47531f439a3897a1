import asyncio
import logging

from errors import Spillover
from models.job import Job

logger = logging.getLogger(__name__)


class JobQueue:
    """
    Fixed-capacity FIFO of jobs shared by every endpoint.

    Producers are the request handlers, which never wait on it: a submit
    either lands immediately or fails with Spillover. The executor is the
    only consumer.
    """

    def __init__(self, capacity: int):
        self.capacity = max(1, capacity)
        self._queue: "asyncio.Queue[Job]" = asyncio.Queue(maxsize=self.capacity)

    def __len__(self) -> int:
        return self._queue.qsize()

    def submit(self, job: Job) -> None:
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning(f"Buffer spillover, dropping job for {job.describe()}")
            raise Spillover()
        logger.debug(f"Queued job for {job.describe()} ({len(self)}/{self.capacity})")

    async def get(self) -> Job:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()
