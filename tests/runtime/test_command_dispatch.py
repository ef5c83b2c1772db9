import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from pomodoro import MonotonicClock
from runtime import CommandDispatcher, build_app_state
from storage import PersistenceGateway, StoragePaths

_NOW = datetime(2024, 3, 6, 15, 0, tzinfo=timezone.utc)


class _FakeClock:
    def __init__(self):
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


class CommandDispatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        root = Path(self._temp_dir.name)
        self.clock = _FakeClock()
        gateway = PersistenceGateway(
            StoragePaths.from_dirs(root / "config", root / "data"),
            clock=MonotonicClock(self.clock),
        )
        self.state = build_app_state(
            gateway,
            clock=MonotonicClock(self.clock),
            now_fn=lambda: _NOW,
            local_now_fn=lambda: _NOW,
        )
        self.dispatcher = CommandDispatcher(self.state)

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def _type(self, text: str) -> None:
        for key in text:
            self.dispatcher.handle_key(key)

    def test_space_toggles_timer(self) -> None:
        started = self.dispatcher.handle_key(" ")
        self.clock.value += 60
        paused = self.dispatcher.handle_key(" ")

        self.assertTrue(started.accepted)
        self.assertEqual("start", started.action)
        self.assertIn("Work started", started.message)
        self.assertEqual("pause", paused.action)
        self.assertIn("24:00", paused.message)
        self.assertFalse(self.state.engine.is_running)

    def test_keys_are_case_insensitive(self) -> None:
        outcome = self.dispatcher.handle_key("S")

        self.assertEqual("skip", outcome.action)
        self.assertEqual("short_break", self.state.engine.phase)

    def test_reset_and_skip(self) -> None:
        self.dispatcher.handle_key(" ")
        self.clock.value += 10

        reset = self.dispatcher.handle_key("r")
        skip = self.dispatcher.handle_key("n")

        self.assertEqual("reset", reset.action)
        self.assertEqual(1, len(self.state.recorder))
        self.assertEqual("skip", skip.action)
        self.assertEqual("Skipped to Short Break", skip.message)

    def test_mode_switch_and_duration_adjustment(self) -> None:
        switched = self.dispatcher.handle_key("m")
        longer = self.dispatcher.handle_key("+")
        shorter = self.dispatcher.handle_key("-")
        shorter_again = self.dispatcher.handle_key("-")

        self.assertEqual("Switched to timer mode (25:00)", switched.message)
        self.assertEqual("Timer set to 30:00", longer.message)
        self.assertEqual("Timer set to 25:00", shorter.message)
        self.assertEqual("Timer set to 20:00", shorter_again.message)
        self.assertEqual(1200, self.state.engine.snapshot().duration_seconds)

    def test_duration_keys_rejected_in_pomodoro_mode(self) -> None:
        outcome = self.dispatcher.handle_key("+")

        self.assertFalse(outcome.accepted)
        self.assertIn("timer mode", outcome.message)
        self.assertEqual(1500, self.state.engine.snapshot().duration_seconds)

    def test_duration_below_minimum_is_rejected(self) -> None:
        self.state.engine.switch_mode(120)

        outcome = self.dispatcher.handle_key("-")

        self.assertFalse(outcome.accepted)
        self.assertEqual(120, self.state.engine.snapshot().duration_seconds)

    def test_add_task_through_prompt(self) -> None:
        opened = self.dispatcher.handle_key("a")
        self._type("Write docs #docx")
        self.dispatcher.handle_key("\x7f")
        self.dispatcher.handle_key("\x7f")
        self._type("cs")
        added = self.dispatcher.handle_key("\n")

        self.assertTrue(opened.accepted)
        self.assertIsNone(self.dispatcher.input_buffer)
        self.assertTrue(added.accepted)
        task = self.state.tasks.tasks[0]
        self.assertEqual("Write docs", task.name)
        self.assertEqual(["docs"], task.tags)

    def test_prompt_keys_do_not_trigger_actions(self) -> None:
        self.dispatcher.handle_key("a")
        self._type("q r s")

        self.assertEqual("q r s", self.dispatcher.input_buffer)
        self.assertFalse(self.state.engine.is_running)
        self.assertEqual("work", self.state.engine.phase)

    def test_escape_cancels_prompt(self) -> None:
        self.dispatcher.handle_key("a")
        self._type("Draft")

        outcome = self.dispatcher.handle_key("\x1b")

        self.assertFalse(outcome.accepted)
        self.assertEqual(0, len(self.state.tasks))

    def test_empty_task_name_is_reported(self) -> None:
        self.dispatcher.handle_key("a")

        outcome = self.dispatcher.handle_key("\n")

        self.assertFalse(outcome.accepted)
        self.assertIn("empty", outcome.message)

    def test_added_task_tags_feed_the_ledger(self) -> None:
        self.dispatcher.handle_key("a")
        self._type("Write docs #Docs #review")
        self.dispatcher.handle_key("\n")

        reopened = self.dispatcher.handle_key("a")

        self.assertEqual(1, self.state.tag_ledger.get("docs").count)
        self.assertEqual(1, self.state.tag_ledger.get("review").count)
        self.assertIn("recent #Docs #review", reopened.message)

    def test_tab_completes_partial_tag(self) -> None:
        self.state.add_task("Outline #documentation")
        self.dispatcher.handle_key("a")
        self._type("Edit #doc")
        hint = self.dispatcher.handle_key("\x7f")
        self.dispatcher.handle_key("c")

        completed = self.dispatcher.handle_key("\t")
        self.dispatcher.handle_key("\n")

        self.assertIn("[Tab: #documentation]", hint.message)
        self.assertEqual("New task: Edit #documentation ", completed.message)
        self.assertEqual(["documentation"], self.state.tasks.tasks[-1].tags)
        self.assertEqual(2, self.state.tag_ledger.get("documentation").count)

    def test_tab_without_partial_tag_leaves_buffer(self) -> None:
        self.state.add_task("Outline #documentation")
        self.dispatcher.handle_key("a")
        self._type("Edit ")

        self.dispatcher.handle_key("\t")
        self._type("#zz")
        self.dispatcher.handle_key("\t")

        self.assertEqual("Edit #zz", self.dispatcher.input_buffer)

    def _finished_work_session_id(self) -> str:
        self.state.engine.start()
        self.clock.value += 1500
        return self.state.engine.tick().session_id

    def test_note_prompt_saves_note_without_running_actions(self) -> None:
        session_id = self._finished_work_session_id()
        opened = self.dispatcher.begin_session_note(session_id)
        self._type("fixed q and s")
        self.assertEqual("note", self.dispatcher.prompt)

        saved = self.dispatcher.handle_key("\n")

        self.assertTrue(opened.accepted)
        self.assertTrue(saved.accepted)
        self.assertEqual("Note saved: fixed q and s", saved.message)
        self.assertEqual("fixed q and s", self.state.recorder.sessions[0].note)
        self.assertIsNone(self.dispatcher.prompt)
        self.assertFalse(self.state.engine.is_running)
        self.assertEqual("short_break", self.state.engine.phase)

    def test_note_prompt_skips_on_escape_or_blank_enter(self) -> None:
        session_id = self._finished_work_session_id()
        for keys in (["x", "\x1b"], ["\n"]):
            with self.subTest(keys=keys):
                self.dispatcher.begin_session_note(session_id)
                for key in keys:
                    outcome = self.dispatcher.handle_key(key)

                self.assertFalse(outcome.accepted)
                self.assertEqual("Note skipped", outcome.message)
                self.assertIsNone(self.state.recorder.sessions[0].note)
                self.assertIsNone(self.dispatcher.prompt)

    def test_note_is_capped_while_typing(self) -> None:
        self.dispatcher.begin_session_note(self._finished_work_session_id())

        self._type("n" * 70)

        self.assertEqual("n" * 60, self.dispatcher.input_buffer)

    def test_space_on_empty_note_starts_next_phase(self) -> None:
        self.dispatcher.begin_session_note(self._finished_work_session_id())

        outcome = self.dispatcher.handle_key(" ")

        self.assertEqual("start", outcome.action)
        self.assertTrue(self.state.engine.is_running)
        self.assertEqual("short_break", self.state.engine.phase)
        self.assertIsNone(self.dispatcher.prompt)

    def test_space_inside_note_is_text(self) -> None:
        self.dispatcher.begin_session_note(self._finished_work_session_id())

        self._type("a b")

        self.assertEqual("a b", self.dispatcher.input_buffer)
        self.assertFalse(self.state.engine.is_running)

    def test_late_skip_carries_the_completed_phase(self) -> None:
        self.dispatcher.handle_key(" ")
        self.clock.value += 1500.5

        outcome = self.dispatcher.handle_key("s")

        self.assertEqual("skip", outcome.action)
        self.assertEqual("work", outcome.completed.phase)
        self.assertEqual(self.state.recorder.sessions[0].id, outcome.completed.session_id)
        self.assertEqual("short_break", self.state.engine.phase)

    def test_task_selection_completion_and_cleanup(self) -> None:
        first = self.state.tasks.add("First")
        second = self.state.tasks.add("Second")

        self.dispatcher.handle_key("k")
        self.assertEqual(1, self.dispatcher.selected_index)
        self.dispatcher.handle_key("\n")
        self.assertTrue(self.state.tasks.get(second.id).completed)

        cleared = self.dispatcher.handle_key("c")

        self.assertEqual("Cleared 1 completed task(s)", cleared.message)
        self.assertEqual([first.id], [task.id for task in self.state.tasks])
        self.assertEqual(0, self.dispatcher.selected_index)

    def test_focus_task_toggles_association(self) -> None:
        task = self.state.tasks.add("Write")

        tracked = self.dispatcher.handle_key("t")
        self.assertEqual(task.id, self.state.engine.task_id)
        self.assertIn("Tracking Write", tracked.message)

        self.dispatcher.handle_key("t")
        self.assertIsNone(self.state.engine.task_id)

    def test_delete_selected_task_detaches_timer(self) -> None:
        task = self.state.tasks.add("Write")
        self.dispatcher.handle_key("t")

        outcome = self.dispatcher.handle_key("d")

        self.assertTrue(outcome.accepted)
        self.assertIsNone(self.state.tasks.get(task.id))
        self.assertIsNone(self.state.engine.task_id)

    def test_task_actions_without_tasks(self) -> None:
        for key in ("d", "t", "\n", "j"):
            with self.subTest(key=key):
                self.assertFalse(self.dispatcher.handle_key(key).accepted)

    def test_quit_and_unknown_keys(self) -> None:
        self.assertTrue(self.dispatcher.handle_key("q").quit)
        unknown = self.dispatcher.handle_key("z")
        self.assertIsNone(unknown.action)
        self.assertFalse(unknown.quit)


if __name__ == "__main__":
    unittest.main()
