"""
Console surface tests: keys arrive through the stdin adapter's buffer
parser, the display is captured in a StringIO.
"""

import io

import pytest

from stillpoint.controllers.console_controller import ConsoleController
from stillpoint.hardware.input.keyboard import StdinKeyboardAdapter
from stillpoint.models.enums import SessionState
from stillpoint.models.events import EventType

from conftest import settle


@pytest.fixture
def screen():
    return io.StringIO()


@pytest.fixture
def console(event_bus, controller, screen):
    return ConsoleController(
        event_bus,
        controller,
        preset_minutes=[5, 10, 20, 30],
        scenes=["rain", "forest", "ocean"],
        default_minutes=10,
        default_scene="rain",
        stream=screen,
    )


@pytest.fixture
def keys(event_bus):
    return StdinKeyboardAdapter(event_bus, stdin=io.StringIO())


def test_adapter_parses_keys(event_bus, keys):
    pressed = []
    event_bus.subscribe(EventType.KEYBOARD_KEYPRESS, pressed.append)

    keys.feed("p \r\tM\x1b[A\x03")

    assert [e.key for e in pressed] == ["P", "SPACE", "ENTER", "TAB", "M", "UP", "C"]
    assert pressed[4].modifiers == ["SHIFT"]
    assert pressed[6].modifiers == ["CTRL"]


def test_adapter_keeps_partial_escape_sequence(event_bus, keys):
    pressed = []
    event_bus.subscribe(EventType.KEYBOARD_KEYPRESS, pressed.append)

    keys.feed("\x1b[")
    assert pressed == []

    keys.feed("B")
    assert [e.key for e in pressed] == ["DOWN"]


@pytest.mark.asyncio
async def test_setup_keys_choose_preset_and_scene(console, keys, controller, fake_clock, calls):
    keys.feed("3\t\t")
    assert console.selected_minutes == 20
    assert console.selected_scene == "ocean"

    keys.feed("\r")
    await settle()

    assert controller.state is SessionState.ACTIVE
    assert fake_clock.duration_ms == 20 * 60_000
    assert "audio.start_ambient:ocean" in calls


@pytest.mark.asyncio
async def test_preset_keys_ignored_during_session(console, keys, controller):
    keys.feed("\r")
    await settle()

    keys.feed("1\t")

    assert console.selected_minutes == 10
    assert console.selected_scene == "rain"
    assert controller.state is SessionState.ACTIVE


@pytest.mark.asyncio
async def test_session_keys(console, keys, controller):
    keys.feed("\r")
    await settle()

    keys.feed(" ")
    await settle()
    assert controller.state is SessionState.PAUSED

    keys.feed("p")
    await settle()
    assert controller.state is SessionState.ACTIVE

    keys.feed("m")
    assert controller.session.muted is True
    keys.feed("m")
    assert controller.session.muted is False

    keys.feed("s")
    await settle()
    assert controller.state is SessionState.IDLE


@pytest.mark.asyncio
async def test_countdown_written_once_per_second(console, keys, fake_clock, screen):
    keys.feed("\r")
    await settle()

    fake_clock.tick(599_750)
    fake_clock.tick(599_500)
    fake_clock.tick(599_000)
    fake_clock.tick(598_750)

    output = screen.getvalue()
    assert output.count("\r10:00") == 1
    assert output.count("\r09:59") == 1


@pytest.mark.asyncio
async def test_enter_dismisses_completion_prompt(console, keys, controller, fake_clock, audio, screen):
    keys.feed("\r")
    await settle()

    fake_clock.complete()
    await settle()
    audio.finish_cue()
    await settle()
    assert "Press ENTER" in screen.getvalue()

    keys.feed("\r")
    await settle()

    assert controller.state is SessionState.IDLE
    assert "Ready: 10 min, rain" in screen.getvalue()
