"""
Unit tests for the Game Controller.

Runs real asyncio timers with tiny delays and a scripted transport.
"""

import asyncio

import pytest

from src.game.controller import (
    FAILURE_MESSAGE,
    LOADING_MESSAGE,
    OFFLINE_MESSAGE,
    SUCCESS_MESSAGE,
    FeedbackKind,
    GameController,
    Phase,
)
from src.game.models import GameMode, SessionState
from src.generation.errors import TransportError
from src.generation.puzzle_requester import RETRY_STATUS, PuzzleRequester

TICK = 0.005


async def within(coro, timeout: float = 2.0):
    return await asyncio.wait_for(coro, timeout)


@pytest.fixture
def make_controller(settings, fake_transport_factory, sample_puzzle_json):
    """Build a controller whose transport answers with the given bodies."""

    def _make(*responses, state=None, on_change=None, max_attempts=None):
        transport = fake_transport_factory(*(responses or [sample_puzzle_json] * 5))
        requester = PuzzleRequester(transport, max_attempts=max_attempts, settings=settings)
        controller = GameController(
            requester,
            state=state,
            on_change=on_change,
            settings=settings,
            tick_seconds=TICK,
        )
        return controller, transport

    return _make


async def reach_recall(controller: GameController) -> None:
    await within(controller.start())
    await within(controller.wait_for(Phase.RECALL))


class TestPuzzleLifecycle:
    @pytest.mark.asyncio
    async def test_start_loads_then_memorizes(self, make_controller):
        controller, transport = make_controller()
        task = controller.start()

        assert controller.phase is Phase.LOADING
        assert controller.feedback.message == LOADING_MESSAGE

        puzzle = await within(task)
        assert controller.phase is Phase.MEMORIZING
        assert controller.puzzle == puzzle
        assert controller.feedback is None
        assert controller.timer.running
        assert transport.calls[0]["prompt"] == "Generate a level 1 SEQUENCE puzzle."
        controller.close()

    @pytest.mark.asyncio
    async def test_timer_expiry_opens_recall(self, make_controller):
        controller, _ = make_controller()
        await reach_recall(controller)

        assert controller.phase is Phase.RECALL
        assert controller.timer.expired
        controller.close()

    @pytest.mark.asyncio
    async def test_user_can_skip_memorization(self, make_controller):
        controller, _ = make_controller()
        await within(controller.start())

        controller.begin_recall()

        assert controller.phase is Phase.RECALL
        assert not controller.timer.running
        controller.close()

    @pytest.mark.asyncio
    async def test_answer_ignored_outside_recall(self, make_controller):
        controller, _ = make_controller()
        assert controller.submit_answer("123") is None

        await within(controller.start())
        assert controller.submit_answer("123") is None
        assert controller.state == SessionState()
        controller.close()

    @pytest.mark.asyncio
    async def test_on_change_notified(self, make_controller):
        phases = []
        controller, _ = make_controller(on_change=lambda c: phases.append(c.phase))
        await reach_recall(controller)

        assert phases[0] is Phase.LOADING
        assert Phase.MEMORIZING in phases
        assert phases[-1] is Phase.RECALL
        controller.close()


class TestCorrectAnswer:
    @pytest.mark.asyncio
    async def test_scores_and_fetches_next(self, make_controller):
        controller, transport = make_controller()
        await reach_recall(controller)

        assert controller.submit_answer("1,2,3") is True

        assert controller.phase is Phase.FEEDBACK
        assert controller.feedback.message == SUCCESS_MESSAGE
        assert controller.feedback.kind is FeedbackKind.SUCCESS
        assert controller.state.score == 100
        assert controller.state.streak == 1
        assert controller.state.level == 1
        assert controller.state.is_vibrating is True

        await within(controller.wait_for(Phase.MEMORIZING))

        assert controller.state.is_vibrating is False
        assert len(transport.calls) == 2
        # pre-answer level 1 -> SEQUENCE
        assert transport.calls[1]["prompt"] == "Generate a level 1 SEQUENCE puzzle."
        assert controller.state.mode is GameMode.SEQUENCE
        controller.close()

    @pytest.mark.asyncio
    async def test_vibration_clears_before_next_puzzle(self, make_controller):
        controller, _ = make_controller()
        await reach_recall(controller)
        controller.submit_answer("123")

        await asyncio.sleep(0.04)
        assert controller.phase is Phase.FEEDBACK
        assert controller.state.is_vibrating is False
        controller.close()

    @pytest.mark.asyncio
    async def test_third_in_a_row_levels_up_and_rotates(self, make_controller):
        controller, transport = make_controller(state=SessionState(score=300, level=2, streak=2))
        await reach_recall(controller)

        controller.submit_answer("1 2 3")

        # 100 * 2 * 3
        assert controller.state.score == 900
        assert controller.state.level == 3
        assert controller.state.streak == 3

        await within(controller.wait_for(Phase.MEMORIZING))
        # rotation uses the pre-answer level: 2 % 3 -> REVERSE
        assert controller.state.mode is GameMode.REVERSE
        assert transport.calls[-1]["prompt"] == "Generate a level 3 REVERSE puzzle."
        controller.close()


class TestWrongAnswer:
    @pytest.mark.asyncio
    async def test_shows_explanation_and_waits(self, make_controller):
        controller, transport = make_controller(state=SessionState(score=500, level=4, streak=2))
        await reach_recall(controller)

        assert controller.submit_answer("1,2,4") is False

        assert controller.phase is Phase.EXPLANATION
        assert controller.feedback.message == FAILURE_MESSAGE
        assert controller.state.streak == 0
        assert controller.state.level == 4
        assert controller.state.score == 500
        assert controller.puzzle is not None

        await asyncio.sleep(0.1)
        assert controller.phase is Phase.EXPLANATION
        assert len(transport.calls) == 1
        controller.close()

    @pytest.mark.asyncio
    async def test_retry_refetches_same_level_and_mode(self, make_controller):
        controller, transport = make_controller(
            state=SessionState(level=5, streak=1, mode=GameMode.LOGIC)
        )
        await reach_recall(controller)
        controller.submit_answer("nope")

        task = controller.retry()
        assert controller.phase is Phase.LOADING
        assert controller.user_input == ""
        await within(task)

        assert controller.phase is Phase.MEMORIZING
        assert controller.state.level == 5
        assert controller.state.streak == 0
        assert transport.calls[-1]["prompt"] == "Generate a level 5 LOGIC puzzle."
        controller.close()

    @pytest.mark.asyncio
    async def test_retry_ignored_elsewhere(self, make_controller):
        controller, _ = make_controller()
        await reach_recall(controller)
        assert controller.retry() is None
        controller.close()


class TestFetchFailures:
    @pytest.mark.asyncio
    async def test_retry_status_shown(self, make_controller, sample_puzzle_json):
        messages = []
        controller, transport = make_controller(
            TransportError("down"),
            sample_puzzle_json,
            on_change=lambda c: messages.append(c.feedback.message if c.feedback else None),
        )
        await within(controller.start())

        assert RETRY_STATUS in messages
        assert controller.phase is Phase.MEMORIZING
        assert len(transport.calls) == 2
        controller.close()

    @pytest.mark.asyncio
    async def test_offline_after_cap_then_retry(self, make_controller, sample_puzzle_json):
        controller, _ = make_controller(
            TransportError("down"),
            TransportError("down"),
            sample_puzzle_json,
            max_attempts=2,
        )
        assert await within(controller.start()) is None

        assert controller.phase is Phase.OFFLINE
        assert controller.feedback.message == OFFLINE_MESSAGE

        await within(controller.retry())
        assert controller.phase is Phase.MEMORIZING
        controller.close()

    @pytest.mark.asyncio
    async def test_unexpected_error_goes_offline(self, make_controller, sample_puzzle_json):
        controller, _ = make_controller(RuntimeError("boom"), sample_puzzle_json)
        assert await within(controller.start()) is None

        assert controller.phase is Phase.OFFLINE
        assert controller.feedback.message == OFFLINE_MESSAGE

        await within(controller.retry())
        assert controller.phase is Phase.MEMORIZING
        controller.close()

    @pytest.mark.asyncio
    async def test_new_request_cancels_in_flight_fetch(self, settings, sample_puzzle_json):
        release = asyncio.Event()

        class SlowTransport:
            calls = 0

            async def generate(self, system_instruction, prompt, generation_config):
                SlowTransport.calls += 1
                await release.wait()
                return sample_puzzle_json

            async def close(self):
                pass

        controller = GameController(
            PuzzleRequester(SlowTransport(), settings=settings),
            settings=settings,
            tick_seconds=TICK,
        )
        first = controller.start()
        await asyncio.sleep(0)
        second = controller.request_puzzle(1, GameMode.LOGIC)
        release.set()

        await within(second)
        assert first.cancelled()
        assert controller.phase is Phase.MEMORIZING
        controller.close()


class TestTeardown:
    @pytest.mark.asyncio
    async def test_close_drops_pending_continuations(self, make_controller, settings):
        controller, transport = make_controller()
        await reach_recall(controller)
        controller.submit_answer("123")

        controller.close()
        await asyncio.sleep(settings.success_delay_seconds * 3)

        assert controller.phase is Phase.CLOSED
        assert len(transport.calls) == 1
        assert controller.state.is_vibrating is False

    @pytest.mark.asyncio
    async def test_close_during_memorization(self, make_controller):
        controller, _ = make_controller()
        await within(controller.start())
        timer = controller.timer

        controller.close()
        await asyncio.sleep(TICK * 10)

        assert controller.phase is Phase.CLOSED
        assert controller.timer is None
        assert not timer.expired

    @pytest.mark.asyncio
    async def test_close_during_fetch(self, make_controller):
        controller, _ = make_controller()
        task = controller.start()
        controller.close()

        with pytest.raises(asyncio.CancelledError):
            await task
        with pytest.raises(RuntimeError):
            controller.request_puzzle(1, GameMode.SEQUENCE)
