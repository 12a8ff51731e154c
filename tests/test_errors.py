from __future__ import annotations

from strictsh.core.errors import (
    CommandFailed,
    StrictError,
    UnboundVariable,
    format_error,
    wrap_error,
)


class TestErrors:
    def test_command_failed_message(self):
        exc = CommandFailed(status=2, command="failWithTwo")
        assert str(exc) == "`failWithTwo` exited with status 2"
        assert exc.code == "command_failed"

    def test_unbound_variable(self):
        exc = UnboundVariable(status=1, name="HOME_DIR")
        assert exc.command == "$HOME_DIR"
        assert str(exc) == "HOME_DIR: unbound variable"
        assert isinstance(exc, CommandFailed)

    def test_format_error_prefixes_code(self):
        error = StrictError(code="bash_missing", message="no bash", detail="bash")
        assert format_error(error) == "[bash_missing] no bash (bash)"

    def test_format_plain_exception(self):
        assert format_error(ValueError("bad")) == "bad"

    def test_wrap_error(self):
        wrapped = wrap_error(OSError("denied"), code="launch", message="Launch failed")
        assert str(wrapped) == "Launch failed (denied)"
        original = StrictError(code="x", message="y")
        assert wrap_error(original, code="z", message="w") is original
