"""Tests for the argument classifier (core/args.py) and the models it builds."""

from __future__ import annotations

import pytest

from shellfish.core.args import classify, count_config_files, is_config_file
from shellfish.core.models import Invocation
from shellfish.exceptions import InvocationError


# ---------------------------------------------------------------------------
# Config-file recognition
# ---------------------------------------------------------------------------

class TestIsConfigFile:
    @pytest.mark.parametrize(
        "token",
        ["a.config", "dir/sim.id.config", ".config"],
    )
    def test_suffix_matches(self, token: str) -> None:
        assert is_config_file(token)

    @pytest.mark.parametrize(
        "token",
        ["a.cfg", "config", "a.config.bak", "--IDs"],
    )
    def test_other_tokens(self, token: str) -> None:
        assert not is_config_file(token)


class TestCountConfigFiles:
    def test_empty(self) -> None:
        assert count_config_files([]) == 0

    def test_counts_trailing_run_only(self) -> None:
        tokens = ["x.config", "--Max", "3", "g.config", "m.config"]
        assert count_config_files(tokens) == 2

    def test_not_capped(self) -> None:
        assert count_config_files(["a.config"] * 5) == 5

    def test_no_trailing_config(self) -> None:
        assert count_config_files(["a.config", "--Max", "3"]) == 0


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------

class TestClassify:
    def test_mode_only(self) -> None:
        inv = classify(["shellfish", "id"])
        assert inv == Invocation(program="shellfish", mode="id", flags=(), config_files=())
        assert inv.config_count == 0

    def test_flags_and_configs(self) -> None:
        inv = classify(
            ["shellfish", "id", "--IDType", "ID", "--IDs", "1, 2", "g.config", "m.config"],
        )
        assert inv.mode == "id"
        assert inv.flags == ("--IDType", "ID", "--IDs", "1, 2")
        assert inv.config_files == ("g.config", "m.config")
        assert inv.config_count == 2

    def test_flags_without_configs(self) -> None:
        inv = classify(["shellfish", "coord", "--Values", "M200m"])
        assert inv.flags == ("--Values", "M200m")
        assert inv.config_files == ()

    def test_config_before_flag_is_a_flag_value(self) -> None:
        inv = classify(["shellfish", "id", "a.config", "--Max", "1"])
        assert inv.flags == ("a.config", "--Max", "1")
        assert inv.config_count == 0

    @pytest.mark.parametrize("argv", [[], ["shellfish"]])
    def test_missing_mode(self, argv: list[str]) -> None:
        with pytest.raises(InvocationError, match="not supplied with a mode") as exc_info:
            classify(argv)
        assert exc_info.value.hint is not None
        assert "shellfish help" in exc_info.value.hint

    def test_invocation_is_frozen(self) -> None:
        inv = classify(["shellfish", "id"])
        with pytest.raises(AttributeError):
            inv.mode = "tree"  # type: ignore[misc]
