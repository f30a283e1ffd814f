"""Tests for artdeploy.output.console module."""

from __future__ import annotations

import pytest

from artdeploy.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixed_levels(self) -> None:
        console = MockConsole()
        console.success("deployed")
        console.error("failed")
        console.warning("careful")
        console.info("note")

        assert console.messages == [
            "OK deployed",
            "error: failed",
            "warning: careful",
            "info: note",
        ]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Deploying")
        console.newline()
        assert console.outputs[0].style == Style.HEADER
        assert console.outputs[1].message == ""

    def test_helpers(self) -> None:
        console = MockConsole()
        console.print("a", Style.DIM)
        console.print("b", Style.DIM)
        console.warning("c")

        assert console.count(Style.DIM) == 2
        assert console.has_warning()
        assert not console.has_error()
        assert [r.message for r in console.find("b")] == ["b"]
        assert console.text == "a\nb\nwarning: c"

        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("typed")


class TestRichConsole:
    def test_dim_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().print("detail", Style.DIM)
        assert "detail" not in capsys.readouterr().out

        RichConsole(verbose=True).print("detail", Style.DIM)
        assert "detail" in capsys.readouterr().out

    def test_markup_in_message_is_escaped(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().info("release [1.0.0]")
        assert "[1.0.0]" in capsys.readouterr().out

    def test_error_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("boom")
        assert "error: boom" in capsys.readouterr().out

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(stderr=True).warning("careful")
        captured = capsys.readouterr()
        assert "careful" in captured.err
        assert "careful" not in captured.out
