import unittest

from pomodoro import InvalidTaskName, NotFound
from tasks import TaskStore, parse_task_input
from tasks.models import MAX_TASK_NAME_LENGTH


class ParseTaskInputTests(unittest.TestCase):
    def test_hash_words_become_tags(self) -> None:
        name, tags = parse_task_input("Write report #work #Urgent #work")

        self.assertEqual("Write report", name)
        self.assertEqual(["work", "Urgent"], tags)

    def test_lone_hash_is_kept_in_name(self) -> None:
        name, tags = parse_task_input("Fix bug # now")

        self.assertEqual("Fix bug # now", name)
        self.assertEqual([], tags)

    def test_long_names_are_truncated(self) -> None:
        name, _ = parse_task_input("x" * (MAX_TASK_NAME_LENGTH + 10))

        self.assertEqual(MAX_TASK_NAME_LENGTH, len(name))


class TaskStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.changes = []
        self.store = TaskStore(on_change=lambda: self.changes.append(1))

    def test_add_creates_open_task(self) -> None:
        task = self.store.add("  Read   chapter 3 #study ")

        self.assertEqual("Read chapter 3", task.name)
        self.assertEqual(["study"], task.tags)
        self.assertFalse(task.completed)
        self.assertEqual(0, task.pomodoros_spent)
        self.assertIn(task.id, self.store)
        self.assertEqual(1, len(self.changes))

    def test_add_rejects_blank_names(self) -> None:
        for raw in ("", "   ", "#only #tags"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidTaskName):
                    self.store.add(raw)
        self.assertEqual(0, len(self.store))
        self.assertEqual([], self.changes)

    def test_edit_renames(self) -> None:
        task = self.store.add("Draft")

        self.store.edit(task.id, "  Final   draft ")

        self.assertEqual("Final draft", self.store.get(task.id).name)
        with self.assertRaises(InvalidTaskName):
            self.store.edit(task.id, " ")

    def test_toggle_complete_flips_state(self) -> None:
        task = self.store.add("Draft")

        self.assertTrue(self.store.toggle_complete(task.id).completed)
        self.assertFalse(self.store.toggle_complete(task.id).completed)

    def test_operations_on_missing_task_raise_not_found(self) -> None:
        with self.assertRaises(NotFound):
            self.store.toggle_complete("missing")
        with self.assertRaises(NotFound):
            self.store.delete("missing")
        with self.assertRaises(NotFound):
            self.store.edit("missing", "name")

    def test_delete_notifies_listeners(self) -> None:
        deleted = []
        self.store.add_delete_listener(deleted.append)
        task = self.store.add("Draft")

        self.store.delete(task.id)

        self.assertEqual([task.id], deleted)
        self.assertIsNone(self.store.get(task.id))

    def test_clear_completed_removes_only_completed(self) -> None:
        deleted = []
        self.store.add_delete_listener(deleted.append)
        keep = self.store.add("Keep")
        done = self.store.add("Done")
        self.store.toggle_complete(done.id)

        removed = self.store.clear_completed()

        self.assertEqual(1, removed)
        self.assertEqual([keep], list(self.store))
        self.assertEqual([done.id], deleted)
        self.assertEqual(0, self.store.clear_completed())

    def test_credit_pomodoro_increments_counter(self) -> None:
        task = self.store.add("Draft")

        self.store.credit_pomodoro(task.id)
        self.store.credit_pomodoro(task.id)

        self.assertEqual(2, self.store.get(task.id).pomodoros_spent)
        self.assertIsNone(self.store.credit_pomodoro("missing"))

    def test_clear_removes_all_tasks(self) -> None:
        deleted = []
        self.store.add_delete_listener(deleted.append)
        first = self.store.add("One")
        second = self.store.add("Two")

        self.store.clear()

        self.assertEqual(0, len(self.store))
        self.assertEqual([first.id, second.id], deleted)

    def test_order_is_insertion_order(self) -> None:
        names = ["a", "b", "c"]
        for name in names:
            self.store.add(name)

        self.assertEqual(names, [task.name for task in self.store])


if __name__ == "__main__":
    unittest.main()
