from __future__ import annotations

import subprocess

import pytest

from paneboard.errors import DeliveryError, DeliveryTimeout, ExitCode, TargetNotFound, TransportFailure
from paneboard.sender import LoggingPaneSender, TmuxPaneSender, build_send_keys_command


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_send_keys_command_targets_pane_with_all_tokens() -> None:
    assert build_send_keys_command("%3", ["l", "s", "Enter"]) == ["tmux", "send-keys", "-t", "%3", "l", "s", "Enter"]


def test_payload_is_sent_in_a_single_invocation() -> None:
    calls: list[list[str]] = []
    seen_kwargs: list[dict[str, object]] = []

    def runner(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        calls.append(cmd)
        seen_kwargs.append(kwargs)
        return _cp(0)

    TmuxPaneSender(runner=runner, timeout_seconds=2.5).deliver("{last}", ("e", "c", "h", "o"))

    assert calls == [["tmux", "send-keys", "-t", "{last}", "e", "c", "h", "o"]]
    assert seen_kwargs[0]["timeout"] == 2.5
    assert seen_kwargs[0]["check"] is False


def test_empty_payload_is_not_sent() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        raise AssertionError("runner should not be called")

    TmuxPaneSender(runner=runner).deliver("%1", ())


@pytest.mark.parametrize(
    "stderr",
    [
        "can't find pane: %42\n",
        "can't find session: work\n",
        "no such window: 7\n",
    ],
)
def test_missing_target_maps_to_target_not_found(stderr: str) -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        return _cp(1, stderr=stderr)

    with pytest.raises(TargetNotFound) as exc_info:
        TmuxPaneSender(runner=runner).deliver("%42", ("a",))

    assert exc_info.value.target == "%42"
    assert exc_info.value.code == ExitCode.DELIVERY_ERROR


def test_other_failures_map_to_transport_failure() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        return _cp(1, stderr="no server running on /tmp/tmux-1000/default\n")

    with pytest.raises(TransportFailure) as exc_info:
        TmuxPaneSender(runner=runner).deliver("%1", ("a",))

    assert exc_info.value.returncode == 1
    assert "no server running" in exc_info.value.hint


def test_missing_tmux_binary_maps_to_transport_failure() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        raise FileNotFoundError(2, "No such file or directory", "tmux")

    with pytest.raises(TransportFailure):
        TmuxPaneSender(runner=runner).deliver("%1", ("a",))


def test_timeout_maps_to_delivery_timeout() -> None:
    def runner(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    with pytest.raises(DeliveryTimeout) as exc_info:
        TmuxPaneSender(runner=runner, timeout_seconds=0.5).deliver("%1", ("a",))

    assert isinstance(exc_info.value, DeliveryError)
    assert "timed out" in exc_info.value.message


def test_custom_tmux_binary_is_used() -> None:
    calls: list[list[str]] = []

    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        calls.append(cmd)
        return _cp(0)

    TmuxPaneSender(runner=runner, tmux="/opt/tmux/bin/tmux").deliver("%1", ("Enter",))

    assert calls[0][0] == "/opt/tmux/bin/tmux"


def test_logging_sender_records_payloads() -> None:
    sender = LoggingPaneSender()

    sender.deliver("%1", ["C-c"])
    sender.deliver("%1", ("a", "b"))

    assert sender.sent == [("%1", ("C-c",)), ("%1", ("a", "b"))]


@pytest.mark.parametrize(
    "error",
    [
        ValueError("embedded null byte"),
        UnicodeEncodeError("utf-8", "\ud800", 0, 1, "surrogates not allowed"),
    ],
)
def test_unencodable_tokens_map_to_transport_failure(error: Exception) -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        raise error

    with pytest.raises(TransportFailure) as exc_info:
        TmuxPaneSender(runner=runner).deliver("%1", ("a\x00",))

    assert exc_info.value.target == "%1"
    assert exc_info.value.__cause__ is error
