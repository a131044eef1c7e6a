import unittest

from vlfview.config import BATCH_SIZE, MAX_OVERLAP, WindowSettings


class TestWindowSettings(unittest.TestCase):
    def test_defaults_follow_module_constants(self):
        settings = WindowSettings()
        self.assertEqual(settings.batch_size, BATCH_SIZE)
        self.assertEqual(settings.max_overlap, MAX_OVERLAP)
        self.assertEqual(settings.decode_tolerance, (-3, 0))

    def test_default_overlap(self):
        self.assertEqual(WindowSettings(batch_size=1024).default_overlap(), 128)
        self.assertEqual(WindowSettings(batch_size=1 << 20).default_overlap(), 1024)
        self.assertEqual(WindowSettings(batch_size=1024).default_overlap(80), 10)

    def test_with_batch_keeps_other_fields(self):
        settings = WindowSettings(sample_size=32, highlight_duration=2.0)
        smaller = settings.with_batch(4096)
        self.assertEqual(smaller.batch_size, 4096)
        self.assertEqual((smaller.sample_size, smaller.highlight_duration), (32, 2.0))
        self.assertNotEqual(settings.batch_size, 4096)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            WindowSettings(batch_size=0)
        with self.assertRaises(ValueError):
            WindowSettings().with_batch(-1)
        with self.assertRaises(ValueError):
            WindowSettings(probe_depth=-1)


if __name__ == '__main__':
    unittest.main()
