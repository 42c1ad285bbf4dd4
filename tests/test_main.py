import signal

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from main import install_signal_handlers, main as main_workflow, parse_args


def test_parse_args_defaults_to_loop():
    args = parse_args([])
    assert not args.once
    assert not args.rebuild


def test_parse_args_modes_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(['--once', '--rebuild'])


@pytest.mark.asyncio
async def test_once_runs_a_single_poll(app_config):
    with patch('main.load_app_config', return_value=app_config), \
         patch('main.poll_once', new_callable=AsyncMock) as mock_poll, \
         patch('main.rebuild_all', new_callable=AsyncMock) as mock_rebuild, \
         patch('main.PollScheduler') as mock_scheduler:
        await main_workflow(['--once'])

    mock_poll.assert_awaited_once()
    assert mock_poll.await_args.args[0] is app_config
    mock_rebuild.assert_not_awaited()
    mock_scheduler.assert_not_called()


@pytest.mark.asyncio
async def test_rebuild_runs_once(app_config):
    with patch('main.load_app_config', return_value=app_config), \
         patch('main.poll_once', new_callable=AsyncMock) as mock_poll, \
         patch('main.rebuild_all', new_callable=AsyncMock) as mock_rebuild:
        await main_workflow(['--rebuild'])

    mock_rebuild.assert_awaited_once()
    mock_poll.assert_not_awaited()


@pytest.mark.asyncio
async def test_default_runs_scheduler_with_signal_handlers(app_config):
    scheduler = MagicMock()
    scheduler.run = AsyncMock()
    with patch('main.load_app_config', return_value=app_config), \
         patch('main.PollScheduler', return_value=scheduler) as mock_scheduler, \
         patch('main.install_signal_handlers') as mock_signals:
        await main_workflow([])

    assert mock_scheduler.call_args.args[0] is app_config
    mock_signals.assert_called_once_with(scheduler)
    scheduler.run.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_keys_abort_before_any_cycle():
    with patch('main.load_app_config', side_effect=ValueError("keys missing")), \
         patch('main.poll_once', new_callable=AsyncMock) as mock_poll:
        with pytest.raises(ValueError):
            await main_workflow(['--once'])
    mock_poll.assert_not_awaited()


def test_sigusr1_is_wired_to_the_scheduler(app_config):
    scheduler = MagicMock()
    with patch('main.asyncio.get_running_loop') as mock_loop:
        install_signal_handlers(scheduler)

    handlers = {call.args[0]: call.args[1] for call in mock_loop.return_value.add_signal_handler.call_args_list}
    assert handlers[signal.SIGUSR1] is scheduler.request_rebuild_soon
    assert handlers[signal.SIGINT] is scheduler.stop
    assert handlers[signal.SIGTERM] is scheduler.stop
