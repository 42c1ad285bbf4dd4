import asyncio

from services.poller import poll_once
from services.rebuild import rebuild_all
from utils.logger import logger

POLL = 'poll'
REBUILD = 'rebuild'

class PollScheduler:
    """
    Runs poll cycles on a timer plus rebuilds on request, one at a time.

    Jobs go through a queue of size one read by a single worker, so a
    request made while a cycle runs waits until the worker is free again.
    stop() takes effect between cycles; a running cycle always completes.
    """

    def __init__(self, app_config, repository, poll_fn=poll_once, rebuild_fn=rebuild_all):
        self.app_config = app_config
        self.repository = repository
        self.poll_fn = poll_fn
        self.rebuild_fn = rebuild_fn
        self.interval_seconds = app_config.poll_interval_seconds
        self.jobs = asyncio.Queue(maxsize=1)
        self.cycle_lock = asyncio.Lock()
        self.stopped = asyncio.Event()
        self.pending_requests = set()

    async def request_poll(self):
        await self.jobs.put(POLL)

    async def request_rebuild(self):
        if self.stopped.is_set():
            logger.warn("Rebuild requested while stopping; ignored")
            return
        logger.log("Rebuild requested")
        await self.jobs.put(REBUILD)

    def request_rebuild_soon(self):
        """
        Schedules request_rebuild() from synchronous code such as a signal
        handler. Requests still waiting for queue space when run() returns
        are cancelled.
        """
        task = asyncio.ensure_future(self.request_rebuild())
        self.pending_requests.add(task)
        task.add_done_callback(self.pending_requests.discard)
        return task

    def stop(self):
        logger.log("Stop requested; finishing the current cycle")
        self.stopped.set()

    async def run_cycle(self, job):
        async with self.cycle_lock:
            try:
                if job == REBUILD:
                    return await self.rebuild_fn(self.app_config, self.repository)
                return await self.poll_fn(self.app_config, self.repository)
            except Exception as e:
                # A failed cycle is reported; the next tick starts a fresh one.
                logger.error(f"Failed to {job}: {type(e).__name__}: {e}")
                return None

    async def _next_job(self):
        get_job = asyncio.ensure_future(self.jobs.get())
        wait_stop = asyncio.ensure_future(self.stopped.wait())
        try:
            await asyncio.wait({get_job, wait_stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            wait_stop.cancel()
        if get_job.done():
            return get_job.result()
        get_job.cancel()
        return None

    async def _worker(self):
        while not self.stopped.is_set():
            job = await self._next_job()
            if job is None:
                break
            await self.run_cycle(job)
            self.jobs.task_done()

    async def _ticker(self):
        while not self.stopped.is_set():
            await self.request_poll()
            try:
                await asyncio.wait_for(self.stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    async def run(self):
        """
        Polls immediately, then every interval, until stop() is called.
        """
        logger.log(f"Starting poll loop (every {self.interval_seconds:g}s)")
        ticker = asyncio.ensure_future(self._ticker())
        try:
            await self._worker()
        finally:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass
            for request in list(self.pending_requests):
                request.cancel()
            await asyncio.gather(*self.pending_requests, return_exceptions=True)
        logger.log("Poll loop stopped")
