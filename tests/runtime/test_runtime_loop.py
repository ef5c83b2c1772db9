import json
import logging
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from app_config import AppConfig
from pomodoro import MonotonicClock
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks, build_app_state
from storage import PersistenceGateway, StoragePaths

_NOW = datetime(2024, 3, 6, 15, 0, tzinfo=timezone.utc)


class _FakeClock:
    def __init__(self):
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


class _FakeTerminal:
    """Replays scripted keys; callables run as side effects, exceptions are raised."""
    def __init__(self, script, trace):
        self._script = list(script)
        self._trace = trace

    def __enter__(self):
        self._trace.append("enter")
        return self

    def __exit__(self, exc_type, exc, traceback):
        self._trace.append("restore")

    def read_key(self, timeout_seconds):
        if not self._script:
            raise AssertionError("key script exhausted")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            item()
            return None
        return item


class _PresentationStub:
    def __init__(self):
        self.statuses: list[str] = []
        self.messages: list[tuple[str, str]] = []

    def show_status(self, text):
        self.statuses.append(text)

    def show_message(self, text, *, level="info"):
        self.messages.append((level, text))


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self._temp_dir.name)
        self.clock = _FakeClock()
        self.trace: list[str] = []
        gateway = PersistenceGateway(
            StoragePaths.from_dirs(self.root / "config", self.root / "data"),
            clock=MonotonicClock(self.clock),
        )
        self.state = build_app_state(
            gateway,
            clock=MonotonicClock(self.clock),
            now_fn=lambda: _NOW,
            local_now_fn=lambda: _NOW,
        )
        original_flush = gateway.flush

        def traced_flush():
            self.trace.append("flush")
            return original_flush()

        gateway.flush = traced_flush
        self.presentation = _PresentationStub()

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def _engine(self, script) -> RuntimeEngine:
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("runtime.test"),
                app_config=AppConfig(),
                state=self.state,
                terminal=_FakeTerminal(script, self.trace),
                presentation=self.presentation,
                hooks=RuntimeHooks(
                    setup_signal_handlers=lambda: self.trace.append("signals"),
                    ignore_signals=lambda: self.trace.append("ignore"),
                ),
            )
        )

    def _advance(self, seconds):
        def advance():
            self.clock.value += seconds

        return advance

    def _sessions_on_disk(self):
        path = self.root / "data" / "sessions.json"
        return json.loads(path.read_text(encoding="utf-8"))["sessions"]

    def test_quit_restores_terminal_then_flushes(self) -> None:
        exit_code = self._engine(["q"]).run()

        self.assertEqual(0, exit_code)
        self.assertEqual(["signals", "enter", "restore", "ignore", "flush"], self.trace)

    def test_completion_is_recorded_alerted_and_persisted(self) -> None:
        exit_code = self._engine([" ", self._advance(1500), "\x1b", "q"]).run()

        self.assertEqual(0, exit_code)
        sessions = self._sessions_on_disk()
        self.assertEqual(1, len(sessions))
        self.assertTrue(sessions[0]["completed"])
        self.assertEqual(1500, sessions[0]["duration_secs"])
        self.assertIn(("notification", "Work session complete! Up next: Short Break"), self.presentation.messages)
        self.assertIn(("info", "Short Break ready. Press space to start."), self.presentation.messages)
        self.assertTrue(self.presentation.statuses[-1].startswith("[Short Break] 05:00 (ready)"))

    def test_pending_writes_are_flushed_on_system_exit(self) -> None:
        script = ["a", "A", "\n", "a", "B", "\n", SystemExit(0)]

        with self.assertRaises(SystemExit):
            self._engine(script).run()

        self.assertEqual(["signals", "enter", "restore", "ignore", "flush"], self.trace)
        tasks = json.loads((self.root / "data" / "tasks.json").read_text(encoding="utf-8"))
        self.assertEqual(["A", "B"], [task["name"] for task in tasks["tasks"]])

    def test_keyboard_interrupt_exits_cleanly(self) -> None:
        exit_code = self._engine([KeyboardInterrupt()]).run()

        self.assertEqual(0, exit_code)
        self.assertEqual(["signals", "enter", "restore", "ignore", "flush"], self.trace)

    def test_unexpected_error_still_flushes(self) -> None:
        with self.assertLogs("runtime.test", level=logging.ERROR):
            exit_code = self._engine([" ", self._advance(10), RuntimeError("boom")]).run()

        self.assertEqual(1, exit_code)
        self.assertEqual(["signals", "enter", "restore", "ignore", "flush"], self.trace)

    def test_work_completion_prompts_for_a_note_that_is_persisted(self) -> None:
        script = [" ", self._advance(1500), "f", "i", "x", "\n", "q"]

        exit_code = self._engine(script).run()

        self.assertEqual(0, exit_code)
        self.assertIn(
            ("info", "Session note (Enter to save, Esc to skip, space to start next):"),
            self.presentation.messages,
        )
        self.assertIn(("info", "Note saved: fix"), self.presentation.messages)
        self.assertEqual("fix", self._sessions_on_disk()[0]["note"])

    def test_space_on_empty_note_starts_the_break(self) -> None:
        script = [" ", self._advance(1500), " ", self._advance(60), "q"]

        self._engine(script).run()

        snapshot = self.state.engine.snapshot()
        self.assertEqual("short_break", snapshot.phase)
        self.assertTrue(snapshot.is_running)
        self.assertEqual(240, snapshot.remaining_seconds)
        self.assertNotIn("note", self._sessions_on_disk()[0])

    def test_command_after_unseen_expiry_reports_the_completion(self) -> None:
        runtime = self._engine([])
        runtime.handle_key(" ")
        self.clock.value += 1500.5

        outcome = runtime.handle_key("s")

        self.assertTrue(outcome.accepted)
        self.assertEqual("work", outcome.completed.phase)
        self.assertIn(("notification", "Work session complete! Up next: Short Break"), self.presentation.messages)
        self.assertEqual("note", runtime.dispatcher.prompt)
        self.assertEqual("short_break", self.state.engine.snapshot().phase)
        self.assertEqual(1, len(self.state.recorder))

        for key in "late":
            runtime.handle_key(key)
        runtime.handle_key("\n")

        self.assertEqual("late", self.state.recorder.sessions[0].note)
        self.assertIsNone(runtime.dispatcher.prompt)

    def test_break_completion_does_not_prompt_for_a_note(self) -> None:
        runtime = self._engine([])
        self.state.engine.skip()
        runtime.handle_key(" ")
        self.clock.value += 300

        runtime.step()

        self.assertIsNone(runtime.dispatcher.prompt)

    def test_status_line_shows_goal_and_task(self) -> None:
        task = self.state.tasks.add("Write")
        self.state.engine.associate_task(task.id)

        self._engine(["q"]).run()

        self.assertEqual(
            "[Work 1/4] 25:00 (ready) today 0m goal 0/8 task: Write",
            self.presentation.statuses[0],
        )


if __name__ == "__main__":
    unittest.main()
