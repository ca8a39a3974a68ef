from __future__ import annotations

import io

from hat606.spinner import Spinner, render_error


def test_spinner_disabled_is_noop() -> None:
    spinner = Spinner("Rendering", enabled=False)
    spinner.start()
    spinner.update("Still rendering")
    spinner.stop()
    assert not spinner.enabled


def test_spinner_disabled_for_non_tty_stream() -> None:
    with Spinner("Rendering", stream=io.StringIO()) as spinner:
        assert not spinner.enabled


def test_render_error_plain_text_when_not_tty() -> None:
    stream = io.StringIO()
    render_error("encode", OSError("disk full"), stream=stream)
    assert stream.getvalue().startswith("encode failed: OSError: disk full")
