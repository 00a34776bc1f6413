"""Unit tests for incremental name extraction over a chunked stream."""

import asyncio

import pytest

from services.base_llm import LLMConfigurationError
from services.name_stream import (
    NameStreamSession,
    ProviderError,
    TransportFailure,
    parse_business_names,
)

from conftest import make_answer, make_block


ANSWER = (
    "Sure! Here are some ideas:\n\n"
    + make_block("Lumora", index=1, handles=True)
    + make_block("Café Lumière", index=2)
    + "**Name:** Quillo\n**Pronounced:** KWIL-oh\n**Why:** Short and sharp.\n"
    + "Name: Zentrix\nPronounced: ZEN-tricks\nWhy: Calm precision."
)


def split_every(data, size):
    return [data[i:i + size] for i in range(0, len(data), size)]


async def chunk_source(chunks):
    for chunk in chunks:
        yield chunk


def run_session(chunks, **kwargs):
    received = []
    session = NameStreamSession(on_record=received.append, **kwargs)
    for chunk in chunks:
        session.feed(chunk)
    session.finish()
    return session, received


@pytest.mark.parametrize("size", [1, 2, 5, 13, 64, len(ANSWER)])
def test_chunking_does_not_change_records(size):
    expected = parse_business_names(ANSWER)
    session, received = run_session(split_every(ANSWER, size))

    assert [r.name for r in expected] == ["Lumora", "Café Lumière", "Quillo", "Zentrix"]
    assert received == expected
    assert session.records == expected


@pytest.mark.parametrize("size", [1, 3, 7])
def test_byte_chunks_split_inside_multibyte_characters(size):
    data = ANSWER.encode("utf-8")
    _, received = run_session(split_every(data, size))

    assert [r.name for r in received] == ["Lumora", "Café Lumière", "Quillo", "Zentrix"]
    assert received[1].domain == "caflumire.com"
    assert received[0].social_handles.twitter == "lumorahq"
    assert received[1].social_handles.twitter == "caflumire"


def test_block_is_not_emitted_before_its_fields_are_complete():
    received = []
    session = NameStreamSession(on_record=received.append)

    session.feed("Name: Lumora\nPronounced: loo-MOR-ah\nWhy: Evokes li")
    assert received == []

    session.feed("ght.\n")
    assert received == []

    session.feed("\n")
    assert received == []

    session.feed("Hope that helps!\n")
    assert [r.description for r in received] == ["Evokes light."]


def test_incremental_scan_emits_before_stream_end():
    received = []
    session = NameStreamSession(on_record=received.append)

    session.feed(make_block("Lumora"))
    assert received == []

    session.feed("Name: Quillo\nPronounced: KWIL-oh\nWhy: Short.")
    assert [r.name for r in received] == ["Lumora"]

    session.finish()
    assert [r.name for r in received] == ["Lumora", "Quillo"]


def test_final_pass_recovers_everything_without_incremental_scan():
    received = []
    session = NameStreamSession(on_record=received.append, incremental=False)

    for chunk in split_every(ANSWER, 10):
        session.feed(chunk)
    assert received == []

    session.finish()
    assert [r.name for r in received] == ["Lumora", "Café Lumière", "Quillo", "Zentrix"]


def test_duplicate_names_are_emitted_once():
    text = make_block("Lumora") + make_block("Quillo") + make_block("Lumora")
    _, received = run_session(split_every(text, 4))

    assert [r.name for r in received] == ["Lumora", "Quillo"]


def test_existing_names_are_never_emitted():
    _, received = run_session([ANSWER], existing_names=["Lumora", "Quillo"])

    assert [r.name for r in received] == ["Café Lumière", "Zentrix"]


def test_emission_stops_at_max_count():
    _, received = run_session(split_every(ANSWER, 3), max_count=2)

    assert [r.name for r in received] == ["Lumora", "Café Lumière"]


def test_malformed_block_is_skipped_and_stream_continues():
    text = (
        make_block("Lumora")
        + "Name: Broken\nPronounced: BRO-ken\n"
        + make_block("Quillo")
    )
    _, received = run_session(split_every(text, 6))

    assert [r.name for r in received] == ["Lumora", "Quillo"]


def test_final_pass_failure_keeps_streamed_records(monkeypatch):
    import services.name_stream.reconciler as reconciler

    def broken_iter_blocks(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(reconciler, "iter_blocks", broken_iter_blocks)

    session, received = run_session([make_block("Lumora"), "Name: Quillo\nPronounced: q\nWhy: w"])

    assert [r.name for r in received] == ["Lumora"]
    assert [r.name for r in session.records] == ["Lumora"]


def test_extractor_skips_block_that_raises(monkeypatch):
    import services.name_stream.extractor as extractor

    original = extractor.parse_block

    def flaky_parse_block(body, grammar):
        if "Lumora" in body:
            raise ValueError("bad block")
        return original(body, grammar)

    monkeypatch.setattr(extractor, "parse_block", flaky_parse_block)

    received = []
    session = NameStreamSession(on_record=received.append)
    session.feed(make_block("Lumora") + make_block("Quillo") + "Name: Zentrix\n")
    assert [r.name for r in received] == ["Quillo"]

    # the final pass parses independently and picks the block up again
    session.finish()
    assert [r.name for r in received] == ["Quillo", "Lumora"]


@pytest.mark.asyncio
async def test_run_returns_all_records():
    session = NameStreamSession()
    records = await session.run(chunk_source(split_every(ANSWER, 9)))

    assert [r.name for r in records] == ["Lumora", "Café Lumière", "Quillo", "Zentrix"]
    assert session.finished


@pytest.mark.asyncio
async def test_run_emits_while_stream_is_still_open():
    received = []
    observed = []

    async def source():
        yield make_block("Lumora")
        yield "Name: Qu"
        observed.append([r.name for r in received])
        yield "illo\nPronounced: KWIL-oh\nWhy: Short.\n\n"

    session = NameStreamSession(on_record=received.append)
    await session.run(source())

    assert observed == [["Lumora"]]
    assert [r.name for r in received] == ["Lumora", "Quillo"]


@pytest.mark.asyncio
async def test_transport_failure_keeps_emitted_records():
    received = []

    async def source():
        yield make_block("Lumora")
        yield "Name: Quillo\nPronounced: KWIL"
        raise ConnectionError("connection reset")

    session = NameStreamSession(on_record=received.append)
    with pytest.raises(TransportFailure) as exc_info:
        await session.run(source())

    assert "connection reset" in str(exc_info.value)
    assert [r.name for r in exc_info.value.records] == ["Lumora"]
    assert [r.name for r in received] == ["Lumora"]


@pytest.mark.asyncio
async def test_provider_error_propagates_unchanged():
    async def source():
        raise ProviderError("OpenAI API error 401: invalid key", 401)
        yield ""

    session = NameStreamSession()
    with pytest.raises(ProviderError) as exc_info:
        await session.run(source())

    assert exc_info.value.status_code == 401
    assert session.records == []


@pytest.mark.asyncio
async def test_sessions_do_not_share_state():
    first, second = NameStreamSession(), NameStreamSession()

    results = await asyncio.gather(
        first.run(chunk_source([make_answer(["Lumora"])])),
        second.run(chunk_source([make_answer(["Lumora", "Quillo"])])),
    )

    assert [r.name for r in results[0]] == ["Lumora"]
    assert [r.name for r in results[1]] == ["Lumora", "Quillo"]


HANDLES_AFTER_BLANK = (
    "Name: Vyntra\n• Pronounced: VIN-tra\n• Why: Blend.\n\n"
    "Handles: @vyntrahq (X), @vyntra_co (Instagram), @getvyntra (Facebook)\n\n"
    "Name: Quillo\n• Pronounced: KWIL-oh\n• Why: Short.\n\n"
    "Let me know if you want more!\n"
)


@pytest.mark.parametrize("size", [1, 4, 11, len(HANDLES_AFTER_BLANK)])
def test_handles_after_blank_line_survive_chunking(size):
    _, received = run_session(split_every(HANDLES_AFTER_BLANK, size))

    assert [r.name for r in received] == ["Vyntra", "Quillo"]
    assert received[0].social_handles.twitter == "vyntrahq"
    assert received[0].social_handles.facebook == "getvyntra"
    assert received[1].social_handles.twitter == "quillo"


def test_block_waits_for_line_after_blank_before_emitting():
    received = []
    session = NameStreamSession(on_record=received.append)

    session.feed("Name: Vyntra\nPronounced: VIN-tra\nWhy: Blend.\n\n")
    assert received == []

    session.feed("@vyntrahq (X)\n\nAnything else?\n")
    assert [r.social_handles.twitter for r in received] == ["vyntrahq"]


@pytest.mark.asyncio
async def test_configuration_error_propagates_unchanged():
    async def source():
        raise LLMConfigurationError("OpenAI API key is not configured.")
        yield ""

    session = NameStreamSession()
    with pytest.raises(LLMConfigurationError, match="not configured"):
        await session.run(source())

    assert session.records == []
