import unittest

from pomodoro import MonotonicClock, next_cycle_step


class NextCycleStepTests(unittest.TestCase):
    def test_work_moves_to_short_break_until_threshold(self) -> None:
        step = next_cycle_step("work", 0, 4)

        self.assertEqual("short_break", step.next_phase)
        self.assertEqual(1, step.work_sessions_completed)

    def test_threshold_work_moves_to_long_break_and_resets(self) -> None:
        step = next_cycle_step("work", 3, 4)

        self.assertEqual("long_break", step.next_phase)
        self.assertEqual(0, step.work_sessions_completed)

    def test_counter_above_threshold_still_long_break(self) -> None:
        step = next_cycle_step("work", 5, 2)

        self.assertEqual("long_break", step.next_phase)

    def test_single_session_cycle_always_long_break(self) -> None:
        self.assertEqual("long_break", next_cycle_step("work", 0, 1).next_phase)

    def test_breaks_return_to_work_keeping_counter(self) -> None:
        for phase in ("short_break", "long_break"):
            with self.subTest(phase=phase):
                step = next_cycle_step(phase, 2, 4)
                self.assertEqual("work", step.next_phase)
                self.assertEqual(2, step.work_sessions_completed)

    def test_custom_phase_is_not_cycled(self) -> None:
        with self.assertRaises(ValueError):
            next_cycle_step("custom", 0, 4)


class MonotonicClockTests(unittest.TestCase):
    def test_never_runs_backwards(self) -> None:
        readings = iter([10.0, 12.0, 11.0, 13.0])
        clock = MonotonicClock(lambda: next(readings))

        self.assertEqual([10.0, 12.0, 12.0, 13.0], [clock.now() for _ in range(4)])

    def test_elapsed_is_non_negative(self) -> None:
        clock = MonotonicClock(lambda: 5.0)

        self.assertEqual(0.0, clock.elapsed(9.0))
        self.assertEqual(2.0, clock.elapsed(3.0))


if __name__ == "__main__":
    unittest.main()
