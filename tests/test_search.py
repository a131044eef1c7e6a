import os
import re
import tempfile
import unittest

from vlfview.config import WindowSettings
from vlfview.errors import ConflictError, InvalidArgument, OperationCancelled
from vlfview.search import Direction, SearchStatus
from vlfview.undo_projector import Insertion
from vlfview.view import FileView
from vlfview.window import always_confirm


class RecordingHighlighter:
    def __init__(self):
        self.calls = []

    def flash(self, window, start, end, duration):
        self.calls.append((window.content[start:end], duration))


class SearchCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def view(self, data: bytes, batch=1024, **kwargs):
        path = os.path.join(self.tmp.name, "data.txt")
        with open(path, "wb") as f:
            f.write(data)
        settings = kwargs.pop("settings", None) or WindowSettings(batch_size=batch)
        view = FileView(path, settings=settings, **kwargs)
        self.addCleanup(view.close)
        return view


class TestForwardSearch(SearchCase):
    def test_matches_inside_first_window(self):
        highlighter = RecordingHighlighter()
        view = self.view(b"a" * 10000, highlighter=highlighter)
        outcome = view.search_forward(r"a{5}", 3)
        self.assertIs(outcome.status, SearchStatus.ALL_FOUND)
        self.assertEqual((outcome.match_start, outcome.match_end), (10, 15))
        self.assertEqual(view.snapshot()[:2], (0, 1024))
        self.assertEqual(view.window.point_byte(), 15)
        self.assertEqual(highlighter.calls, [("aaaaa", view.settings.highlight_duration)])

    def test_match_straddling_window_edge(self):
        data = bytearray(b"a" * 10000)
        data[1020:1030] = b"b" * 10
        view = self.view(bytes(data))
        self.assertEqual(view.settings.default_overlap(), 128)
        outcome = view.search_forward(r"b{10}")
        self.assertTrue(outcome.ok)
        self.assertEqual((outcome.match_start, outcome.match_end), (1020, 1030))
        w = view.window
        self.assertLessEqual(w.start, 1020)
        self.assertGreaterEqual(w.end, 1030)
        self.assertEqual(w.point_byte(), 1030)
        self.assertEqual(w.content[w.char_at(1020):w.point], "b" * 10)

    def test_every_match_in_file_is_counted_once(self):
        view = self.view(b"a" * 10000)
        outcome = view.search_forward(r"a{5}", 2000)
        self.assertTrue(outcome.ok)
        self.assertEqual((outcome.match_start, outcome.match_end), (9995, 10000))
        self.assertEqual(view.window.point_byte(), 10000)

    def test_one_more_than_available_is_partial_and_reverts(self):
        view = self.view(b"a" * 10000)
        view.window.point = 0
        before = view.snapshot()
        outcome = view.search_forward(r"a{5}", 2001)
        self.assertIs(outcome.status, SearchStatus.PARTIALLY_FOUND)
        self.assertEqual(outcome.found, 2000)
        self.assertIsNone(outcome.match_start)
        self.assertEqual(view.snapshot(), before)
        self.assertEqual(view.window.point, 0)

    def test_no_match_reports_file_boundary(self):
        view = self.view(b"abc\n" * 1000)
        outcome = view.search_forward("xyz")
        self.assertIs(outcome.status, SearchStatus.AT_FILE_BOUNDARY)
        self.assertEqual(outcome.found, 0)
        self.assertEqual(view.snapshot()[:2], (0, 1024))

    def test_search_starts_at_point(self):
        view = self.view(b"key=1;key=2;key=3;")
        view.window.point = 7
        outcome = view.search_forward(r"key=(\d)")
        self.assertEqual(outcome.match_start, 12)

    def test_non_positive_count(self):
        view = self.view(b"abc")
        with self.assertRaises(InvalidArgument):
            view.search_forward("a", 0)
        with self.assertRaises(InvalidArgument):
            view.search_backward("a", -2)

    def test_bad_overlap(self):
        view = self.view(b"abc" * 1000)
        with self.assertRaises(InvalidArgument):
            view.search("a", overlap=1024)

    def test_compiled_pattern(self):
        view = self.view(b"Hello HELLO hello")
        outcome = view.search_forward(re.compile("hello", re.IGNORECASE), 2)
        self.assertEqual((outcome.match_start, outcome.match_end), (6, 11))

    def test_multibyte_offsets_across_windows(self):
        data = ("é" * 3000 + "needle" + "é" * 100).encode("utf-8")
        view = self.view(data, batch=1000)
        outcome = view.search_forward("needle")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.match_start, 6000)
        self.assertEqual(outcome.match_end, 6006)
        w = view.window
        self.assertEqual(w.codec.encode(w.content), data[w.start:w.end])


class TestBackwardSearch(SearchCase):
    def test_forward_then_backward_lands_on_same_match(self):
        view = self.view(b"a" * 10000)
        forward = view.search_forward(r"a{5}", 300)
        backward = view.search_backward(r"a{5}", 1)
        self.assertEqual((backward.match_start, backward.match_end),
                         (forward.match_start, forward.match_end))
        self.assertEqual(view.window.point_byte(), forward.match_start)

    def test_backward_across_windows(self):
        data = b"marker" + b"-" * 9000
        view = self.view(data)
        view.move_to(len(data) - 1024, len(data))
        view.window.point = len(view.content)
        outcome = view.search_backward("marker")
        self.assertTrue(outcome.ok)
        self.assertEqual((outcome.match_start, outcome.match_end), (0, 6))
        self.assertEqual(view.window.point_byte(), 0)

    def test_backward_count(self):
        data = b"".join(b"x%04d " % i for i in range(2000))
        view = self.view(data)
        view.move_to(len(data) - 1024, len(data))
        view.window.point = len(view.content)
        outcome = view.search_backward(r"x\d{4}", 1500)
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.match_start, 500 * 6)

    def test_backward_partial_reverts(self):
        view = self.view(b"ab" * 3000)
        view.move_to(5000, 6000)
        view.window.point = 10
        before = view.snapshot()
        outcome = view.search_backward("ab", 5000)
        self.assertIs(outcome.status, SearchStatus.PARTIALLY_FOUND)
        self.assertEqual(outcome.found, 2505)
        self.assertEqual(view.snapshot(), before)
        self.assertEqual(view.window.point, 10)

    def test_backward_at_file_start(self):
        view = self.view(b"abc")
        outcome = view.search_backward("a")
        self.assertIs(outcome.status, SearchStatus.AT_FILE_BOUNDARY)


class TestProgressAndCancel(SearchCase):
    def test_progress_reported_while_sliding(self):
        seen = []
        view = self.view(b"a" * 5000 + b"Z",
                         settings=WindowSettings(batch_size=1024, progress_interval=1),
                         progress=lambda pos, size: seen.append((pos, size)))
        self.assertTrue(view.search_forward("Z").ok)
        self.assertTrue(seen)
        self.assertTrue(all(size == 5001 for _, size in seen))
        self.assertEqual([p for p, _ in seen], sorted(p for p, _ in seen))

    def test_cancel_restores_window(self):
        view = self.view(b"a" * 5000 + b"Z", cancel=lambda: True)
        view.window.point = 3
        before = view.snapshot()
        with self.assertRaises(OperationCancelled):
            view.search_forward("Z")
        self.assertEqual(view.snapshot(), before)
        self.assertEqual(view.window.point, 3)


class TestVariableLengthMatches(SearchCase):
    def test_match_cut_by_window_edge_is_counted_once(self):
        view = self.view(b"a" * 2000 + b"\n")
        outcome = view.search_forward(r"a+", 2)
        self.assertIs(outcome.status, SearchStatus.PARTIALLY_FOUND)
        self.assertEqual(outcome.found, 1)
        outcome = view.search_forward(r"a+")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.match_end, 2000)

    def test_match_within_overlap_is_found_whole(self):
        view = self.view(b"x" * 1000 + b"a" * 50 + b"x" * 1000)
        outcome = view.search_forward(r"a+")
        self.assertEqual((outcome.match_start, outcome.match_end), (1000, 1050))
        self.assertEqual(view.search_forward(r"a+", 2).found, 1)

    def test_match_ending_on_window_edge(self):
        view = self.view(b"x" * 1019 + b"abcde" + b"x" * 1000)
        self.assertEqual(view.snapshot()[:2], (0, 1024))
        outcome = view.search_forward("abcde")
        self.assertEqual((outcome.match_start, outcome.match_end), (1019, 1024))
        self.assertEqual(view.search_forward("abcde", 2).found, 1)


class TestDirtyWindow(SearchCase):
    def test_refused_search_keeps_edits(self):
        asked = []
        view = self.view(b"-" * 9000 + b"needle",
                         confirm=lambda reason: asked.append(reason) or False)
        view.buffer.insert(0, "EDIT")
        with self.assertRaises(ConflictError):
            view.search_forward("needle")
        self.assertEqual(len(asked), 1)
        self.assertEqual(view.snapshot(), (0, 1024, 9006, True))
        self.assertTrue(view.content.startswith("EDIT---"))
        self.assertEqual(view.buffer.undo_log, [Insertion(0, 4)])

    def test_confirmed_search_drops_edits(self):
        asked = []
        view = self.view(b"-" * 9000 + b"needle",
                         confirm=lambda reason: asked.append(reason) or True)
        view.buffer.insert(0, "EDIT")
        outcome = view.search_forward("needle")
        self.assertTrue(outcome.ok)
        self.assertEqual(len(asked), 1)
        self.assertEqual((outcome.match_start, outcome.match_end), (9000, 9006))
        w = view.window
        self.assertFalse(w.dirty)
        self.assertEqual(w.codec.encode(w.content), (b"-" * 9000 + b"needle")[w.start:w.end])
        self.assertEqual(w.content[w.char_at(9000):w.point], "needle")

    def test_match_inside_dirty_window_keeps_edits(self):
        view = self.view(b"abc needle xyz " + b"-" * 3000,
                         confirm=lambda reason: self.fail(reason))
        view.buffer.insert(0, "EDIT")
        outcome = view.search_forward("needle")
        self.assertTrue(outcome.ok)
        w = view.window
        self.assertTrue(w.dirty)
        self.assertEqual(view.snapshot()[:2], (0, 1024))
        self.assertTrue(w.content.startswith("EDITabc needle"))
        self.assertEqual(w.content[w.point - 6:w.point], "needle")

    def test_failed_search_restores_edits(self):
        view = self.view(b"0123456789" * 500, confirm=always_confirm)
        view.buffer.insert(0, "EDIT")
        outcome = view.search_forward("nothing-like-this")
        self.assertIs(outcome.status, SearchStatus.AT_FILE_BOUNDARY)
        self.assertTrue(view.snapshot().dirty)
        self.assertTrue(view.content.startswith("EDIT0123"))
        view.buffer.undo()
        self.assertTrue(view.content.startswith("0123"))


class TestDirection(unittest.TestCase):
    def test_values(self):
        self.assertEqual(Direction("forward"), Direction.FORWARD)
        self.assertEqual(Direction("backward"), Direction.BACKWARD)


if __name__ == '__main__':
    unittest.main()
