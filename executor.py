import asyncio
import enum
import logging
import traceback
from typing import Optional

from errors import CommandError, CommandTimeout
from job_queue import JobQueue
from models.endpoint import CommandSpec
from models.job import Job
from utils import run_command

logger = logging.getLogger(__name__)


class JobStatus(enum.Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def resolve_command(job: Job) -> Optional[CommandSpec]:
    """
    Pick the command for a job: the endpoint's override for this exact ref,
    then the endpoint's default command, otherwise nothing.
    """
    endpoint = job.endpoint
    command = endpoint.command_for(job.event.ref)
    if command is not None:
        logger.info("Found per-ref command.")
        return command
    command = endpoint.default_command
    if command is not None:
        logger.info("Found global per-repo command.")
        return command
    return None


class Executor:
    """
    Single worker draining the job queue.

    Jobs run strictly one after another, so two commands never overlap.
    A slow command holds up everything queued behind it.
    """

    def __init__(self, queue: JobQueue, timeout: Optional[float] = None, verbose: bool = False):
        self.queue = queue
        self.timeout = timeout or None
        self.verbose = verbose

    def execute(self, job: Job) -> JobStatus:
        command = resolve_command(job)
        if command is None:
            logger.info(f"No matching command for ref {job.event.ref!r} found, skipping.")
            return JobStatus.SKIPPED

        argv = command.argv()
        logger.info(f"{job.describe()}, command: {argv}")
        try:
            run_command(argv, timeout=self.timeout, verbose=self.verbose)
        except CommandTimeout as e:
            logger.error(f"{job.describe()}, command: {argv}, command run: {e}")
            return JobStatus.TIMED_OUT
        except CommandError as e:
            logger.error(f"{job.describe()}, command: {argv}, command run: {e}")
            return JobStatus.FAILED
        return JobStatus.SUCCEEDED

    async def run(self):
        """
        Take jobs from the queue forever, running each one in a worker thread
        so request handling on the event loop is never blocked.
        """
        loop = asyncio.get_running_loop()
        logger.info(f"Executor started (timeout: {self.timeout}, verbose: {self.verbose}).")
        while True:
            job = await self.queue.get()
            try:
                await loop.run_in_executor(None, self.execute, job)
            except asyncio.CancelledError:
                logger.info("Executor stopped.")
                raise
            except Exception as e:
                error_trace = traceback.format_exc()
                logger.error(f"Unexpected error while running job for {job.describe()}: {str(e)}\n{error_trace}")
            finally:
                self.queue.task_done()
