"""Tests for the mode dispatcher (core/dispatcher.py).

These drive whole invocations, ``argv`` in and catalog lines out, against
the ``sim`` fixture's files.
"""

from __future__ import annotations

import io
import logging
from unittest.mock import MagicMock

import pytest

from conftest import Sim
from shellfish.core.dispatcher import (
    TERMINATION_NOTICE,
    ModeDispatcher,
    is_failure_marker,
    read_lines,
)
from shellfish.core.memo import memo_config_path
from shellfish.core.models import Phase
from shellfish.core.resolver import GLOBAL_CONFIG_ENV_VAR
from shellfish.exceptions import (
    ConfigError,
    InvocationError,
    MemoMismatchError,
    UnknownModeError,
    UpstreamFailureError,
)
from shellfish.modes.prof import ProfMode

ID_HEADER = "# Column contents: ID(0) Snapshot(1)"


def _dispatch(argv: list[str], stdin: str = "", **kwargs: object) -> tuple[ModeDispatcher, list[str]]:
    kwargs.setdefault("environ", {})
    dispatcher = ModeDispatcher(**kwargs)  # type: ignore[arg-type]
    out = dispatcher.dispatch(["shellfish", *argv], io.StringIO(stdin))
    return dispatcher, out


# ---------------------------------------------------------------------------
# stdin handling
# ---------------------------------------------------------------------------

class TestReadLines:
    def test_drops_single_trailing_newline(self) -> None:
        assert read_lines(io.StringIO("a\nb\n")) == ["a", "b"]

    def test_keeps_inner_blank_lines(self) -> None:
        assert read_lines(io.StringIO("a\n\nb\n\n")) == ["a", "", "b", ""]

    def test_empty(self) -> None:
        assert read_lines(io.StringIO("")) == []

    def test_failure_marker(self) -> None:
        assert is_failure_marker([TERMINATION_NOTICE])
        assert is_failure_marker(["Shellfish could not find the memo dir."])
        assert not is_failure_marker([TERMINATION_NOTICE, "10 1"])
        assert not is_failure_marker(["10 1"])
        assert not is_failure_marker([])


# ---------------------------------------------------------------------------
# Successful invocations
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_id_end_to_end(self, sim: Sim) -> None:
        config = sim.write_config()
        dispatcher, out = _dispatch(["id", "--Max", "1", str(config)])
        assert out == [ID_HEADER, "10 1"]
        assert dispatcher.phase is Phase.SUCCEEDED
        assert dispatcher.mode_name == "id"
        assert memo_config_path(sim.memo_dir).read_bytes() == config.read_bytes()

    def test_mode_config_then_flags(self, sim: Sim) -> None:
        config = sim.write_config()
        mode_config = sim.write_mode_config("id", Max="1")
        _, out = _dispatch(["id", str(config), str(mode_config)])
        assert out == [ID_HEADER, "10 1"]

        _, out = _dispatch(["id", "--Max", "2", str(config), str(mode_config)])
        assert out == [ID_HEADER, "10 1", "11 1"]

    def test_global_config_from_environment(self, sim: Sim) -> None:
        config = sim.write_config()
        mode_config = sim.write_mode_config("id", IDType="ID", IDs="12")
        _, out = _dispatch(
            ["id", str(mode_config)],
            environ={GLOBAL_CONFIG_ENV_VAR: str(config)},
        )
        assert out == [ID_HEADER, "12 1"]

    def test_pipeline(self, sim: Sim) -> None:
        config = str(sim.write_config())
        _, ids = _dispatch(["id", "--ExclusionStrategy", "subhalo", config])
        _, branches = _dispatch(["tree", config], "\n".join(ids) + "\n")
        _, coords = _dispatch(["coord", config], "\n".join(branches) + "\n")
        assert branches == [ID_HEADER, "10 1", "1 0", "12 1", "3 0"]
        assert coords[1:] == [
            "10 1 0 0 0 1",
            "1 0 0.1 0 0 0.9",
            "12 1 10 10 10 0.3",
            "3 0 9.9 10 10 0.3",
        ]

    def test_halo_free_mode_with_nil_types(self, sim: Sim) -> None:
        config = sim.write_config(HaloType="nil", TreeType="nil")
        kernel = MagicMock(return_value=["10 1 0.5 2"])
        dispatcher, out = _dispatch(
            ["prof", str(config)],
            "10 1 0 0 0 1\n",
            registry={"prof": lambda: ProfMode(kernel=kernel)},
        )
        assert out[1:] == ["10 1 0.5 2"]
        assert dispatcher.phase is Phase.SUCCEEDED
        env = kernel.call_args.args[2]
        assert env.halos is None
        assert env.snapshots is not None
        assert env.memo_dir == sim.memo_dir

    def test_empty_input_short_circuits(self, sim: Sim) -> None:
        dispatcher, out = _dispatch(["coord"], "")
        assert out == []
        assert dispatcher.phase is Phase.SUCCEEDED
        assert not memo_config_path(sim.memo_dir).exists()

    def test_dispatcher_runs_once(self, sim: Sim) -> None:
        dispatcher, _ = _dispatch(["coord"], "")
        with pytest.raises(RuntimeError):
            dispatcher.dispatch(["shellfish", "coord"], io.StringIO(""))


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestDispatchFailures:
    def test_upstream_failure_is_forwarded(self, sim: Sim) -> None:
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(UpstreamFailureError) as exc_info:
            dispatcher.dispatch(
                ["shellfish", "coord", str(sim.write_config())],
                io.StringIO(f"{TERMINATION_NOTICE}\n"),
            )
        assert exc_info.value.marker == TERMINATION_NOTICE
        assert dispatcher.phase is Phase.FAILED
        assert not memo_config_path(sim.memo_dir).exists()

    def test_unknown_mode(self) -> None:
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(UnknownModeError):
            dispatcher.dispatch(["shellfish", "halo"], io.StringIO(""))
        assert dispatcher.phase is Phase.FAILED
        assert dispatcher.mode_name == "halo"

    def test_missing_mode(self) -> None:
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(InvocationError):
            dispatcher.dispatch(["shellfish"], io.StringIO(""))
        assert dispatcher.phase is Phase.FAILED

    def test_no_config_files(self) -> None:
        with pytest.raises(InvocationError, match="No config files"):
            _dispatch(["id"])

    def test_memo_mismatch_stops_before_backends(self, sim: Sim) -> None:
        _dispatch(["id", str(sim.write_config())])
        changed = sim.write_config("changed.config", HaloPositionUnits="kpc/h")
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(MemoMismatchError, match="HaloPositionUnits"):
            dispatcher.dispatch(["shellfish", "id", str(changed)], io.StringIO(""))
        assert dispatcher.phase is Phase.FAILED

    def test_bad_flag_stops_before_memo_dir(self, sim: Sim) -> None:
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(InvocationError, match="--Bogus"):
            dispatcher.dispatch(
                ["shellfish", "id", "--Bogus", "1", str(sim.write_config())],
                io.StringIO(""),
            )
        assert dispatcher.phase is Phase.FAILED
        assert not memo_config_path(sim.memo_dir).exists()

    def test_invalid_mode_config_stops_before_memo_dir(self, sim: Sim) -> None:
        dispatcher = ModeDispatcher(environ={})
        with pytest.raises(ConfigError, match="MassMin"):
            dispatcher.dispatch(
                [
                    "shellfish", "id", "--MassMin", "2", "--MassMax", "1",
                    str(sim.write_config()),
                ],
                io.StringIO(""),
            )
        assert dispatcher.phase is Phase.FAILED
        assert not memo_config_path(sim.memo_dir).exists()

    def test_nil_halo_type_for_halo_mode(self, sim: Sim) -> None:
        config = sim.write_config(HaloType="nil")
        with pytest.raises(ConfigError, match="nil as a HaloType for the mode 'tree'"):
            _dispatch(["tree", str(config)], "10 1\n")

    def test_phase_trace(
        self,
        sim: Sim,
        caplog: pytest.LogCaptureFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        # setup_logging() detaches the shellfish tree from the root logger.
        monkeypatch.setattr(logging.getLogger("shellfish"), "propagate", True)
        caplog.set_level(logging.DEBUG, logger="shellfish")
        _dispatch(["id", str(sim.write_config())])
        phases = [r.getMessage() for r in caplog.records if "->" in r.getMessage()]
        assert phases == [
            "id: start -> classified",
            "id: classified -> config-resolved",
            "id: config-resolved -> memo-validated",
            "id: memo-validated -> backend-ready",
            "id: backend-ready -> dispatched",
            "id: dispatched -> succeeded",
        ]
