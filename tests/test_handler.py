from ophis.mcp import CallToolRequest, text_result
from ophis.tools.generator import Generator
from ophis.tools.handler import default_handler, with_handler


def test_default_handler_success_returns_text():
    result = default_handler(CallToolRequest("t"), b"all good", None)
    assert not result.is_error
    assert result.content[0]["text"] == "all good"


def test_default_handler_error_includes_output():
    err = RuntimeError("exit status 2")
    result = default_handler(CallToolRequest("t"), b"partial", err)
    assert result.is_error
    text = result.content[0]["text"]
    assert text.startswith("command execution failed: ")
    assert "exit status 2" in text and "partial" in text


def test_default_handler_error_without_output():
    result = default_handler(CallToolRequest("t"), b"", RuntimeError("bad"))
    assert "Output" not in result.content[0]["text"]


def test_with_handler_sets_generator_handler():
    def custom(request, data, error):
        return text_result("custom")

    assert Generator(with_handler(custom)).handler is custom