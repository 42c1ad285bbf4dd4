import argparse
import asyncio
import signal

from config import load_app_config
from db.repository import repository
from services.poller import poll_once
from services.rebuild import rebuild_all
from services.scheduler import PollScheduler
from utils.logger import logger

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Save tweets shared over DM into a Google Sheet.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--once', action='store_true', help="Run a single poll cycle and exit")
    mode.add_argument('--rebuild', action='store_true', help="Rebuild derived columns for every row and exit")
    return parser.parse_args(argv)

def install_signal_handlers(scheduler):
    """
    SIGUSR1 requests a rebuild; SIGINT/SIGTERM stop the loop between cycles.
    """
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGUSR1, scheduler.request_rebuild_soon)
        loop.add_signal_handler(signal.SIGINT, scheduler.stop)
        loop.add_signal_handler(signal.SIGTERM, scheduler.stop)
    except (NotImplementedError, AttributeError):
        logger.warn("Signal handlers are not supported on this platform; use Ctrl+C to exit")

async def main(argv=None):
    args = parse_args(argv)
    app_config = load_app_config()

    if args.once:
        await poll_once(app_config, repository)
        return
    if args.rebuild:
        await rebuild_all(app_config, repository)
        return

    scheduler = PollScheduler(app_config, repository)
    install_signal_handlers(scheduler)
    await scheduler.run()

async def run():
    try:
        logger.log('🚀 Starting tweet saver...')
        await main()
        logger.log('✅ Tweet saver finished')
    except Exception as error:
        logger.error(f'❌ Tweet saver failed: {error}')
        raise

if __name__ == "__main__":
    asyncio.run(run())
