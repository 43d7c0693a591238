import asyncio
import base64

from stubs import CollectingSink, StubBrowser

from live_browser_agent.session.frames import FrameLoop


def test_tick_is_dropped_while_capture_in_flight():
    async def scenario() -> tuple[StubBrowser, CollectingSink, FrameLoop, list[bool]]:
        browser = StubBrowser()
        browser.launched = True
        browser.screenshot_gate = asyncio.Event()
        sink = CollectingSink()
        loop = FrameLoop(browser, sink)

        results = [loop.tick()]
        await asyncio.sleep(0)
        results.append(loop.tick())
        results.append(loop.tick())
        browser.screenshot_gate.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        results.append(loop.tick())
        await asyncio.sleep(0)
        await loop.stop()
        return browser, sink, loop, results

    browser, sink, loop, results = asyncio.run(scenario())

    assert results == [True, False, False, True]
    assert loop.skipped == 2
    assert sink.offered[0].type == "frame"
    assert base64.b64decode(sink.offered[0].data) == b"frame-bytes"


def test_tick_skipped_when_browser_not_launched():
    async def scenario() -> tuple[StubBrowser, FrameLoop, bool]:
        browser = StubBrowser()
        loop = FrameLoop(browser, CollectingSink())
        started = loop.tick()
        await loop.stop()
        return browser, loop, started

    browser, loop, started = asyncio.run(scenario())

    assert started is False
    assert browser.screenshot_calls == 0


def test_capture_errors_are_swallowed():
    async def scenario() -> CollectingSink:
        browser = StubBrowser(fail_actions={"screenshot": "Target page navigated"})
        browser.launched = True
        sink = CollectingSink()
        loop = FrameLoop(browser, sink)
        loop.tick()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert loop.capture_in_flight is False
        await loop.stop()
        return sink

    assert asyncio.run(scenario()).offered == []


def test_start_and_stop_are_idempotent():
    async def scenario() -> tuple[FrameLoop, CollectingSink]:
        browser = StubBrowser()
        browser.launched = True
        sink = CollectingSink()
        loop = FrameLoop(browser, sink, interval=0.001)
        loop.start()
        first = loop._timer
        loop.start()
        assert loop._timer is first
        await asyncio.sleep(0.02)
        await loop.stop()
        await loop.stop()
        return loop, sink

    loop, sink = asyncio.run(scenario())

    assert loop.running is False
    assert loop.captured == len(sink.offered) >= 1
