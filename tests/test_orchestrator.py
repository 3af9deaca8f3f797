"""Tests for mindmate/orchestrator.py."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

import mindmate.orchestrator as orchestrator_module
from mindmate.models import MODE_STANDARD, ModelResponse
from mindmate.orchestrator import DebateOrchestrator, has_debate_history
from mindmate.personas import PERSONAS
from mindmate.providers.base import ProviderError
from mindmate.responder import generate_debate_reply
from tests.conftest import FIXED_NOW, MockProvider, make_message, make_response

NAMES = [p.name for p in PERSONAS]


def _counting_provider() -> MockProvider:
    provider = MockProvider()
    counter = {"n": 0}

    async def reply(prompt: str, *, temperature: float | None = None) -> ModelResponse:
        counter["n"] += 1
        return make_response(f"reply {counter['n']}")

    provider.invoke = AsyncMock(side_effect=reply)
    return provider


@pytest.fixture
def orchestrator(sample_prompts_config, fixed_clock) -> DebateOrchestrator:
    return DebateOrchestrator(_counting_provider(), sample_prompts_config, clock=fixed_clock)


def test_has_debate_history():
    assert has_debate_history([]) is False
    assert has_debate_history([make_message("hi", type=MODE_STANDARD)]) is False
    assert has_debate_history([make_message("Joy!", sender="ai", agent_name="Joy")]) is False
    assert has_debate_history([make_message("hi")]) is True


def test_constructor_rejects_bad_setup(sample_prompts_config, mock_provider):
    with pytest.raises(ValueError):
        DebateOrchestrator(mock_provider, sample_prompts_config, personas=[])
    with pytest.raises(ValueError):
        DebateOrchestrator(mock_provider, sample_prompts_config, debate_turns=-1)


@pytest.mark.parametrize("turn", range(12))
def test_persona_for_turn_round_robin(orchestrator, turn):
    assert orchestrator.persona_for_turn(turn) is PERSONAS[turn % len(PERSONAS)]


async def test_first_turn_runs_burst_then_debate(orchestrator):
    replies = await orchestrator.run_debate_turn("conv-1", "I lost my job today", [])

    assert len(replies) == 5 + 3
    assert [r.persona_name for r in replies[:5]] == NAMES
    assert [r.persona_name for r in replies[5:]] == ["Joy", "Sadness", "Anger"]
    assert not any(r.failed for r in replies)


async def test_second_turn_skips_burst(orchestrator):
    history = [make_message("I lost my job today")] + [
        make_message(f"{name} reacts", sender="ai", agent_name=name, timestamp=1_001) for name in NAMES
    ]

    replies = await orchestrator.run_debate_turn("conv-1", "And my rent is due", history)

    assert len(replies) == 3
    assert [r.persona_name for r in replies] == ["Joy", "Sadness", "Anger"]


async def test_explicit_flag_overrides_history_scan(orchestrator):
    replies = await orchestrator.run_debate_turn("conv-1", "hello", [], initial_burst_done=True)
    assert len(replies) == 3

    history = [make_message("old message")]
    replies = await orchestrator.run_debate_turn("conv-1", "hello again", history, initial_burst_done=False)
    assert len(replies) == 8


async def test_debate_turns_see_accumulated_transcript(sample_prompts_config, fixed_clock):
    orchestrator = DebateOrchestrator(_counting_provider(), sample_prompts_config, clock=fixed_clock)
    spy = AsyncMock(side_effect=generate_debate_reply)

    with patch.object(orchestrator_module, "generate_debate_reply", spy):
        replies = await orchestrator.run_debate_turn("conv-1", "I lost my job today", [])

    assert spy.await_count == 3
    for turn, call in enumerate(spy.call_args_list):
        transcript = call.args[0]
        persona = call.args[1]
        assert persona is PERSONAS[turn]
        assert transcript[0].speaker == "user"
        assert transcript[0].text == "I lost my job today"
        # user message + 5 initial replies + every earlier debate reply
        assert len(transcript) == 1 + 5 + turn
        assert [e.text for e in transcript[1:]] == [r.text for r in replies[: 5 + turn]]


async def test_prior_history_precedes_user_message(sample_prompts_config, fixed_clock):
    orchestrator = DebateOrchestrator(_counting_provider(), sample_prompts_config, clock=fixed_clock)
    history = [make_message("first"), make_message("Joy says hi", sender="ai", agent_name="Joy")]
    spy = AsyncMock(side_effect=generate_debate_reply)

    with patch.object(orchestrator_module, "generate_debate_reply", spy):
        await orchestrator.run_debate_turn("conv-1", "second", history)

    transcript = spy.call_args_list[0].args[0]
    assert [(e.speaker, e.text) for e in transcript] == [
        ("user", "first"),
        ("Joy", "Joy says hi"),
        ("user", "second"),
    ]


async def test_prior_history_is_not_modified(orchestrator):
    history = [make_message("I lost my job today")]
    snapshot = [(m.sender, m.text) for m in history]

    await orchestrator.run_debate_turn("conv-1", "more", history)

    assert [(m.sender, m.text) for m in history] == snapshot


async def test_debate_timestamps_strictly_increase(orchestrator):
    replies = await orchestrator.run_debate_turn("conv-1", "I lost my job today", [])

    base = int(FIXED_NOW * 1000)
    assert all(r.timestamp_ms == base for r in replies[:5])
    assert [r.timestamp_ms for r in replies[5:]] == [base + 100, base + 200, base + 300]


async def test_zero_debate_turns(sample_prompts_config, fixed_clock):
    orchestrator = DebateOrchestrator(_counting_provider(), sample_prompts_config, debate_turns=0, clock=fixed_clock)

    first = await orchestrator.run_debate_turn("conv-1", "hi", [])
    later = await orchestrator.run_debate_turn("conv-1", "hi", [make_message("hi")])

    assert len(first) == 5
    assert later == []


async def test_round_robin_wraps_past_registry(sample_prompts_config, fixed_clock):
    orchestrator = DebateOrchestrator(_counting_provider(), sample_prompts_config, debate_turns=7, clock=fixed_clock)

    replies = await orchestrator.run_debate_turn("conv-1", "hi", [], initial_burst_done=True)

    assert [r.persona_name for r in replies] == NAMES + NAMES[:2]


async def test_failing_provider_still_yields_full_sequence(sample_prompts_config, fixed_clock):
    provider = MockProvider()
    provider.invoke = AsyncMock(side_effect=ProviderError("mock", "API error"))
    orchestrator = DebateOrchestrator(provider, sample_prompts_config, clock=fixed_clock)

    replies = await orchestrator.run_debate_turn("conv-1", "I lost my job today", [])

    assert len(replies) == 8
    assert all(r.failed for r in replies)
    for reply in replies:
        assert reply.persona_name in reply.text


async def test_one_failing_persona_does_not_abort_burst(sample_prompts_config, fixed_clock):
    provider = MockProvider()

    async def fail_for_anger(prompt: str, *, temperature: float | None = None) -> ModelResponse:
        if "You are Anger" in prompt:
            raise ProviderError("mock", "quota exceeded")
        return make_response("fine")

    provider.invoke = AsyncMock(side_effect=fail_for_anger)
    orchestrator = DebateOrchestrator(provider, sample_prompts_config, clock=fixed_clock)

    replies = await orchestrator.run_debate_turn("conv-1", "hi", [])

    assert [r.persona_name for r in replies[:5]] == NAMES
    assert [r.failed for r in replies[:5]] == [False, False, True, False, False]
    assert replies[7].persona_name == "Anger"
    assert replies[7].failed is True
    assert len(replies) == 8


async def test_initial_burst_is_concurrent_and_debate_sequential(sample_prompts_config, fixed_clock):
    provider = MockProvider()
    in_flight = 0
    peaks: list[int] = []

    async def slow_reply(prompt: str, *, temperature: float | None = None) -> ModelResponse:
        nonlocal in_flight
        in_flight += 1
        peaks.append(in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return make_response("ok")

    provider.invoke = AsyncMock(side_effect=slow_reply)
    orchestrator = DebateOrchestrator(provider, sample_prompts_config, clock=fixed_clock)

    await orchestrator.run_debate_turn("conv-1", "hi", [])

    assert max(peaks[:5]) == 5
    assert peaks[5:] == [1, 1, 1]


async def test_temperature_passed_to_provider(sample_prompts_config, fixed_clock):
    provider = _counting_provider()
    orchestrator = DebateOrchestrator(provider, sample_prompts_config, temperature=0.3, clock=fixed_clock)

    await orchestrator.run_debate_turn("conv-1", "hi", [])

    assert {c.kwargs["temperature"] for c in provider.invoke.call_args_list} == {0.3}
