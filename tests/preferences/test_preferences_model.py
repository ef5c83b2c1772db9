import unittest

from pomodoro import InvalidDuration, InvalidSetting
from preferences import Preferences


class PreferencesTests(unittest.TestCase):
    def test_defaults(self) -> None:
        preferences = Preferences()

        self.assertEqual(1500, preferences.work_duration_seconds)
        self.assertEqual(300, preferences.short_break_seconds)
        self.assertEqual(900, preferences.long_break_seconds)
        self.assertEqual(4, preferences.sessions_before_long_break)
        self.assertEqual("pomodoro", preferences.default_mode)
        self.assertFalse(preferences.auto_start_breaks)
        self.assertTrue(preferences.notifications_enabled)
        self.assertTrue(preferences.sound_enabled)
        self.assertEqual("dark", preferences.theme)
        self.assertEqual(8, preferences.daily_goal_pomodoros)
        self.assertTrue(preferences.show_streak)

    def test_duration_for_phase(self) -> None:
        preferences = Preferences(work_duration_mins=50, short_break_mins=10, long_break_mins=30)

        self.assertEqual(3000, preferences.duration_for_phase("work"))
        self.assertEqual(600, preferences.duration_for_phase("short_break"))
        self.assertEqual(1800, preferences.duration_for_phase("long_break"))
        self.assertEqual(3000, preferences.duration_for_phase("custom"))
        with self.assertRaises(ValueError):
            preferences.duration_for_phase("lunch")

    def test_non_positive_durations_are_rejected(self) -> None:
        for field in ("work_duration_mins", "short_break_mins", "long_break_mins"):
            with self.subTest(field=field):
                with self.assertRaises(InvalidDuration):
                    Preferences(**{field: 0})
                with self.assertRaises(InvalidDuration):
                    Preferences(**{field: -5})

    def test_cycle_length_must_be_at_least_one(self) -> None:
        with self.assertRaises(InvalidDuration):
            Preferences(sessions_before_long_break=0)

    def test_invalid_settings_are_rejected(self) -> None:
        cases = {
            "default_mode": "stopwatch",
            "theme": " ",
            "daily_goal_pomodoros": 0,
            "auto_start_breaks": "yes",
        }
        for field, value in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(InvalidSetting):
                    Preferences(**{field: value})

    def test_with_changes_validates_before_replacing(self) -> None:
        preferences = Preferences()

        updated = preferences.with_changes(work_duration_mins=45, auto_start_breaks=True)

        self.assertEqual(45, updated.work_duration_mins)
        self.assertTrue(updated.auto_start_breaks)
        self.assertEqual(25, preferences.work_duration_mins)
        with self.assertRaises(InvalidDuration):
            preferences.with_changes(short_break_mins=0)
        with self.assertRaises(InvalidSetting):
            preferences.with_changes(volume=11)


if __name__ == "__main__":
    unittest.main()
