"""
Tests for bundleutils.build.runner module.

Tests the restart-on-rebuild plugin including:
- Handler registration on the build host
- Entry selection on the first emit
- Process start on 'done' and stop on 'compile'
- Status output

These are UNIT tests with subprocess.Popen mocked. The integration test at
the bottom starts a real Python child process.
"""

from __future__ import annotations

import os
from pathlib import Path
import sys
import textwrap
from unittest.mock import MagicMock, patch

import pytest

from bundleutils.build import Asset, Compilation, Runner
from bundleutils.build.runner import INTERPRETERS
from bundleutils.logging import SilentLogger


def _compilation(**paths: str) -> Compilation:
    return Compilation(assets={name: Asset(path) for name, path in paths.items()})


def _lines(capsys) -> list[str]:
    return capsys.readouterr().out.splitlines()


@pytest.mark.unit
class TestRunnerSetup:
    """Tests for construction and registration."""

    def test_create_runner(self):
        """Test that a Runner starts unresolved and stopped."""
        runner = Runner()

        assert runner.state.entry is None
        assert runner.state.entry_path is None
        assert runner.state.running is False
        assert runner.state.process is None
        assert runner.state.resolved is False

    def test_apply_registers_handlers(self, compiler):
        """Test that apply() registers the three event handlers."""
        runner = Runner()
        assert compiler.callbacks == {}

        runner.apply(compiler)

        assert compiler.callbacks["after-emit"] == runner.on_assets_emitted
        assert compiler.callbacks["compile"] == runner.on_compilation_starts
        assert compiler.callbacks["done"] == runner.on_compilation_ends


@pytest.mark.unit
class TestEntrySelection:
    """Tests for the after-emit entry selection."""

    def test_required_entry_found(self, compiler, capsys):
        """Test that a preset entry present in the assets is used."""
        runner = Runner("app")
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger(
            "after-emit", _compilation(backend="./backend.js", app="./app.js"), callback
        )

        lines = _lines(capsys)
        assert len(lines) == 3
        assert lines[0] == ""
        assert "Using the following entry: app" in lines[1]
        assert "Entry file:" in lines[2]
        assert runner.state.entry_path == Path(os.path.abspath("app.js"))
        callback.assert_called_once_with()

    def test_required_entry_missing(self, compiler, capsys):
        """Test that a preset entry absent from the assets disables the Runner."""
        runner = Runner("random")
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger(
            "after-emit", _compilation(backend="./backend.js", app="./app.js"), callback
        )

        lines = _lines(capsys)
        assert len(lines) == 3
        assert lines[0] == ""
        assert "The required entry (random) doesn't exist" in lines[1]
        assert "These are the available entries: backend, app" in lines[2]
        assert runner.state.entry is None
        assert runner.state.entry_path is None
        callback.assert_called_once_with()

    def test_only_available_entry(self, compiler, capsys):
        """Test that the single candidate is used when no entry is preset."""
        runner = Runner()
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger("after-emit", _compilation(backend="./backend.js"), callback)

        lines = _lines(capsys)
        assert lines[0] == ""
        assert "Using the only available entry: backend" in lines[1]
        assert "Entry file:" in lines[2]
        assert runner.state.entry == "backend"
        callback.assert_called_once_with()

    def test_fallback_to_first_entry(self, compiler, capsys):
        """Test that the first candidate is used, with a warning, when several exist."""
        runner = Runner()
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger(
            "after-emit", _compilation(backend="./backend.js", app="./app.js"), callback
        )

        lines = _lines(capsys)
        assert len(lines) == 4
        assert lines[0] == ""
        assert "Doing fallback to the first entry: backend" in lines[1]
        assert "These are the available entries: backend, app" in lines[2]
        assert "Entry file:" in lines[3]
        assert runner.state.entry == "backend"
        assert runner.state.entry_path == Path(os.path.abspath("backend.js"))
        callback.assert_called_once_with()

    def test_hot_update_and_non_scripts_filtered(self, compiler, capsys):
        """Test that hot-update fragments and non-script assets are skipped."""
        runner = Runner()
        runner.apply(compiler)

        compiler.trigger(
            "after-emit",
            _compilation(
                **{
                    "main.hot-update": "./main.hot-update.js",
                    "styles": "./styles.css",
                    "server": "./server.py",
                }
            ),
            MagicMock(),
        )

        assert "Using the only available entry: server" in _lines(capsys)[1]
        assert runner.state.entry == "server"

    def test_required_entry_must_be_a_script(self, compiler, capsys):
        """Test that a preset entry pointing at a non-script is rejected."""
        runner = Runner("styles")
        runner.apply(compiler)

        compiler.trigger(
            "after-emit",
            _compilation(styles="./styles.css", server="./server.py"),
            MagicMock(),
        )

        lines = _lines(capsys)
        assert "The required entry (styles) doesn't exist" in lines[1]
        assert "These are the available entries: server" in lines[2]
        assert runner.state.entry is None

    def test_no_candidates(self, compiler, capsys):
        """Test that an emit without scripts leaves the Runner inert."""
        runner = Runner()
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger("after-emit", _compilation(styles="./styles.css"), callback)

        lines = _lines(capsys)
        assert len(lines) == 2
        assert "No runnable entry was emitted" in lines[1]
        assert runner.state.entry is None
        callback.assert_called_once_with()

    def test_selection_runs_once(self, compiler, capsys):
        """Test that later emits skip selection but still call back."""
        runner = Runner("app")
        callback = MagicMock()
        runner.apply(compiler)
        compilation = _compilation(app="./app.js")

        compiler.trigger("after-emit", compilation, callback)
        assert len(_lines(capsys)) == 3
        assert callback.call_count == 1

        compiler.trigger("after-emit", _compilation(other="./other.js"), callback)
        assert _lines(capsys) == []
        assert callback.call_count == 2
        assert runner.state.entry == "app"

    def test_failed_selection_is_not_retried(self, compiler, capsys):
        """Test that a missing entry is not looked up again on the next emit."""
        runner = Runner("app")
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger("after-emit", _compilation(backend="./backend.js"), callback)
        compiler.trigger("after-emit", _compilation(app="./app.js"), callback)

        assert runner.state.entry is None
        assert callback.call_count == 2

    def test_mapping_assets(self, compiler, capsys):
        """Test that hosts may pass assets as mappings with an existsAt key."""
        runner = Runner()
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger(
            "after-emit",
            Compilation(
                assets={
                    "styles": {"existsAt": "./styles.css"},
                    "manifest": {"size": 10},
                    "server": {"existsAt": "./server.js"},
                }
            ),
            callback,
        )

        assert "Using the only available entry: server" in _lines(capsys)[1]
        assert runner.state.entry_path == Path(os.path.abspath("server.js"))
        callback.assert_called_once_with()

    def test_callback_runs_when_selection_fails(self, compiler):
        """Test that the continuation is called even if selection raises."""
        runner = Runner(logger=SilentLogger())
        callback = MagicMock()
        runner.apply(compiler)

        with pytest.raises(AttributeError):
            compiler.trigger("after-emit", object(), callback)

        callback.assert_called_once_with()


@pytest.mark.unit
@patch("bundleutils.build.runner.subprocess.Popen")
class TestProcessLifecycle:
    """Tests for starting and stopping the bundle process."""

    def _resolved_runner(self, compiler, path: str = "app.py") -> Runner:
        runner = Runner("app", logger=SilentLogger())
        runner.apply(compiler)
        compiler.trigger("after-emit", _compilation(app=path), MagicMock())
        return runner

    def test_done_starts_process(self, mock_popen, compiler, capsys):
        """Test that 'done' starts the entry when stopped."""
        runner = Runner("app")
        callback = MagicMock()
        runner.apply(compiler)

        compiler.trigger("after-emit", _compilation(app="app.py"), callback)
        compiler.trigger("done")

        assert mock_popen.call_count == 1
        lines = _lines(capsys)
        assert len(lines) == 5
        assert lines[3] == ""
        assert "Starting bundle process" in lines[4]
        assert runner.state.running is True
        assert runner.state.process is mock_popen.return_value
        assert callback.call_count == 1

    def test_done_while_running_is_ignored(self, mock_popen, compiler):
        """Test that a second 'done' does not start another process."""
        runner = self._resolved_runner(compiler)

        compiler.trigger("done")
        compiler.trigger("done")

        assert mock_popen.call_count == 1
        assert runner.state.running is True

    def test_compile_stops_process(self, mock_popen, compiler, capsys):
        """Test that 'compile' kills the running process."""
        runner = Runner("app")
        runner.apply(compiler)
        compiler.trigger("after-emit", _compilation(app="app.py"), MagicMock())
        compiler.trigger("done")
        process = mock_popen.return_value

        compiler.trigger("compile")

        process.kill.assert_called_once_with()
        lines = _lines(capsys)
        assert len(lines) == 6
        assert "Stopping bundle process" in lines[5]
        assert runner.state.running is False
        assert runner.state.process is None

    def test_compile_while_stopped_is_ignored(self, mock_popen, compiler):
        """Test that 'compile' before any 'done' kills nothing."""
        runner = self._resolved_runner(compiler)

        compiler.trigger("compile")
        compiler.trigger("compile")

        mock_popen.return_value.kill.assert_not_called()
        assert runner.state.running is False

    def test_restart_cycle(self, mock_popen, compiler):
        """Test that each compile/done pair replaces the process."""
        first, second = MagicMock(name="first"), MagicMock(name="second")
        mock_popen.side_effect = [first, second]
        runner = self._resolved_runner(compiler)

        compiler.trigger("done")
        compiler.trigger("compile")
        compiler.trigger("done")

        first.kill.assert_called_once_with()
        second.kill.assert_not_called()
        assert mock_popen.call_count == 2
        assert runner.state.process is second
        assert runner.state.running is True

    def test_unresolved_runner_is_inert(self, mock_popen, compiler):
        """Test that compile and done do nothing without an entry."""
        runner = Runner("missing", logger=SilentLogger())
        runner.apply(compiler)
        compiler.trigger("after-emit", _compilation(app="app.py"), MagicMock())

        compiler.trigger("done")
        compiler.trigger("compile")
        compiler.trigger("done")

        mock_popen.assert_not_called()
        assert runner.state.running is False

    def test_done_before_emit_is_ignored(self, mock_popen, compiler):
        """Test that 'done' before any emit starts nothing."""
        runner = Runner(logger=SilentLogger())
        runner.apply(compiler)

        compiler.trigger("done")

        mock_popen.assert_not_called()

    def test_python_entry_uses_current_interpreter(self, mock_popen, compiler):
        """Test that .py entries run with sys.executable."""
        self._resolved_runner(compiler, "app.py")

        compiler.trigger("done")

        mock_popen.assert_called_once_with(
            [sys.executable, str(Path(os.path.abspath("app.py")))]
        )

    def test_js_entry_uses_node(self, mock_popen, compiler):
        """Test that .js entries run with node."""
        self._resolved_runner(compiler, "dist/app.js")

        compiler.trigger("done")

        command = mock_popen.call_args.args[0]
        assert command[0] == INTERPRETERS[".js"] == "node"
        assert command[1] == str(Path(os.path.abspath("dist/app.js")))

    def test_custom_executable_and_args(self, mock_popen, compiler):
        """Test that executable and args are passed through."""
        runner = Runner(
            "app", executable="/usr/bin/env", args=["--port", "8080"], logger=SilentLogger()
        )
        runner.apply(compiler)
        compiler.trigger("after-emit", _compilation(app="app.py"), MagicMock())

        compiler.trigger("done")

        mock_popen.assert_called_once_with(
            ["/usr/bin/env", str(Path(os.path.abspath("app.py"))), "--port", "8080"]
        )


@pytest.mark.integration
def test_real_process_restart(tmp_path, compiler):
    """Test starting and killing a real Python child process."""
    script = tmp_path / "server.py"
    script.write_text(
        textwrap.dedent(
            """
            import time

            time.sleep(60)
            """
        )
    )
    runner = Runner(logger=SilentLogger())
    runner.apply(compiler)
    compiler.trigger("after-emit", _compilation(server=str(script)), MagicMock())

    compiler.trigger("done")
    process = runner.state.process
    assert process is not None
    assert process.poll() is None

    compiler.trigger("compile")
    process.wait(timeout=10)

    assert process.returncode is not None
    assert runner.state.running is False
