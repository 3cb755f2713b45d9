from pathlib import Path
import subprocess
import tempfile

import snippy_core.cli_adapter as module
from snippy_core.cli_adapter import CommandRunner


def test_run_feeds_input_and_captures_stdout():
    records = []

    def fake_subprocess_run(cmd, *args, **kwargs):
        records.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout=b"picked\n", stderr=None)

    saved = module.subprocess.run
    module.subprocess.run = fake_subprocess_run
    try:
        result = CommandRunner().run(["rofi", "-dmenu"], input_data=b"a\nb\n", capture_output=True)
    finally:
        module.subprocess.run = saved

    assert result.stdout == b"picked\n"
    cmd, kwargs = records[0]
    assert cmd == ["rofi", "-dmenu"]
    assert kwargs["input"] == b"a\nb\n"
    assert kwargs["stdout"] == subprocess.PIPE


def test_run_with_stdin_file():
    seen = []

    def fake_subprocess_run(cmd, *args, **kwargs):
        seen.append(kwargs["stdin"].read())
        return subprocess.CompletedProcess(cmd, 0)

    with tempfile.TemporaryDirectory() as td:
        payload = Path(td) / "payload"
        payload.write_bytes(b"snippet")
        saved = module.subprocess.run
        module.subprocess.run = fake_subprocess_run
        try:
            CommandRunner().run(["wl-copy"], stdin_path=payload)
        finally:
            module.subprocess.run = saved
    assert seen == [b"snippet"]


def test_missing_program_yields_failure_code():
    result = CommandRunner().run(["snippy-test-program-that-does-not-exist"])
    assert result.returncode == 127


def test_start_background_detaches():
    launched = []

    def fake_popen(cmd, **kwargs):
        launched.append((cmd, kwargs))
        return object()

    with tempfile.TemporaryDirectory() as td:
        payload = Path(td) / "payload"
        payload.write_bytes(b"x")
        CommandRunner(popen=fake_popen).start_background(["xsel", "--clipboard", "--input"], stdin_path=payload)

    cmd, kwargs = launched[0]
    assert cmd == ["xsel", "--clipboard", "--input"]
    assert kwargs["start_new_session"] is True
    assert kwargs["stdout"] == subprocess.DEVNULL
