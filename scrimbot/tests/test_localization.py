"""Tests for message catalogs."""

import re
from pathlib import Path

from scrimbot.messages.localization import Localization
from scrimbot.session import errors

_locales_dir = Path(__file__).parent.parent / "locales"
_controller = Path(__file__).parent.parent / "session" / "controller.py"


def setup_module():
    Localization.init(_locales_dir)


def test_available_locales():
    assert "en" in Localization.available_locales()


def test_variables_without_isolation_marks():
    text = Localization.get("en", "queue-joined", player="@Alice", size=3, capacity=10)
    assert text == "@Alice joined the queue. (3/10)"


def test_plural_selection():
    assert Localization.get("en", "vote-closing", seconds=1) == "The map vote closes in 1 second!"
    assert Localization.get("en", "vote-closing", seconds=10) == "The map vote closes in 10 seconds!"


def test_unknown_locale_falls_back_to_english():
    assert Localization.get("xx", "error-captains-taken") == "Both captains are already set."


def test_unknown_message_returns_id():
    assert Localization.get("en", "no-such-message") == "no-such-message"


def test_format_list():
    assert Localization.format_list_and("en", ["A", "B", "C"]) == "A, B, and C"
    assert Localization.format_list_and("en", []) == ""


def test_every_error_has_a_message():
    """Each error class renders to real text, not its message id."""
    for value in vars(errors).values():
        if isinstance(value, type) and issubclass(value, errors.ScrimError):
            assert Localization.get("en", value.message_id) != value.message_id


def test_every_controller_message_exists():
    """Every message id the controller uses is in the English catalog."""
    source = _controller.read_text(encoding="utf-8")
    ids = set(re.findall(r'(?:_say|_text)\(\s*"([a-z-]+)"', source))
    assert "setup-summary" in ids
    for message_id in ids:
        assert Localization.get("en", message_id) != message_id
