import random
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock
from audiobook_syncer.durations import MutagenDurationProvider, is_audio_file, read_duration_ms
from audiobook_syncer.library import AudiobookLibrary
from audiobook_syncer.errors import DurationUnavailable, UnknownFileError
from audiobook_syncer.timeline import build_timeline, scan_audio_files

class FakeDurations:
    def __init__(self, durations):
        self.durations = durations
        self.calls = []

    def __call__(self, path):
        self.calls.append(path.name)
        value = self.durations.get(path.name)
        if value is None:
            raise DurationUnavailable(f"no duration for {path.name}")
        return value

class TestBuildTimeline(unittest.TestCase):
    def test_offsets_accumulate_in_name_order(self):
        durations = FakeDurations({"a.mp3": 1000, "b.mp3": 500, "c.mp3": 250})
        timeline = build_timeline(["/book/c.mp3", "/book/a.mp3", "/book/b.mp3"], durations)

        self.assertEqual(dict(timeline), {"a.mp3": 0, "b.mp3": 1000, "c.mp3": 1500})
        self.assertEqual(list(timeline), ["a.mp3", "b.mp3", "c.mp3"])
        self.assertEqual(timeline.total_duration, 1750)

    def test_start_offset_is_sum_of_previous_durations(self):
        rng = random.Random(3)
        names = [f"{i:03d}.mp3" for i in range(25)]
        durations = {name: rng.randint(0, 600000) for name in names}
        timeline = build_timeline(reversed(names), FakeDurations(durations))

        for k, name in enumerate(names):
            self.assertEqual(timeline[name], sum(durations[n] for n in names[:k]))

    def test_lexicographic_order(self):
        timeline = build_timeline(["2.mp3", "10.mp3"], FakeDurations({"2.mp3": 100, "10.mp3": 300}))
        self.assertEqual(timeline["10.mp3"], 0)
        self.assertEqual(timeline["2.mp3"], 300)

    def test_non_audio_files_take_no_time(self):
        durations = FakeDurations({"a.mp3": 1000, "b.wav": 500})
        files = ["a.mp3", "cover.jpg", "sync_map.json", "b.wav", "notes.txt"]
        timeline = build_timeline(files, durations)

        self.assertEqual(dict(timeline), {"a.mp3": 0, "b.wav": 1000})
        self.assertEqual(sorted(durations.calls), ["a.mp3", "b.wav"])

    def test_failed_duration_counts_as_zero(self):
        durations = FakeDurations({"a.mp3": 1000, "c.mp3": 200})
        with self.assertLogs("audiobook_syncer.timeline", level="WARNING"):
            timeline = build_timeline(["a.mp3", "b.mp3", "c.mp3"], durations)

        self.assertEqual(dict(timeline), {"a.mp3": 0, "b.mp3": 1000, "c.mp3": 1000})
        self.assertEqual(timeline.total_duration, 1200)

    def test_empty(self):
        timeline = build_timeline([], FakeDurations({}))
        self.assertEqual(len(timeline), 0)
        self.assertEqual(timeline.total_duration, 0)
        self.assertFalse(timeline)

class TestTimeline(unittest.TestCase):
    def setUp(self):
        self.timeline = build_timeline(["a.mp3", "b.mp3"], FakeDurations({"a.mp3": 1000, "b.mp3": 500}))

    def test_global_offset(self):
        self.assertEqual(self.timeline.global_offset("a.mp3", 500), 500)
        self.assertEqual(self.timeline.global_offset("b.mp3", 50), 1050)

    def test_unknown_file(self):
        with self.assertRaises(UnknownFileError) as ctx:
            self.timeline.start_of("z.mp3")
        self.assertEqual(ctx.exception.file_name, "z.mp3")

    def test_immutable(self):
        with self.assertRaises(TypeError):
            self.timeline["c.mp3"] = 5

class TestScanning(unittest.TestCase):
    def test_scan_lists_regular_files_only(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.mp3").write_bytes(b"")
            (root / "sync_map.json").write_text("[]")
            (root / "extras").mkdir()
            (root / "extras" / "bonus.mp3").write_bytes(b"")

            names = sorted(p.name for p in scan_audio_files(root))
            self.assertEqual(names, ["a.mp3", "sync_map.json"])

    def test_scan_missing_directory(self):
        self.assertEqual(scan_audio_files("/nonexistent/book"), [])

    def test_is_audio_file(self):
        self.assertTrue(is_audio_file("chapter01.mp3"))
        self.assertTrue(is_audio_file("book.m4b"))
        self.assertFalse(is_audio_file("cover.jpg"))
        self.assertFalse(is_audio_file("README"))

class TestMutagenDurations(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_unreadable_files_count_as_zero(self):
        empty = self.root / "empty.mp3"
        empty.write_bytes(b"")
        zeros = self.root / "zeros.mp3"
        zeros.write_bytes(b"\x00" * 4096)

        provider = MutagenDurationProvider()
        for path in (empty, zeros):
            with self.assertLogs("audiobook_syncer.durations", level="WARNING"):
                self.assertEqual(provider(path), 0)

    def test_read_duration_raises(self):
        empty = self.root / "empty.mp3"
        empty.write_bytes(b"")
        unknown = self.root / "notes.bin"
        unknown.write_bytes(b"just some text")

        with self.assertRaises(DurationUnavailable):
            read_duration_ms(empty)
        with self.assertRaises(DurationUnavailable):
            read_duration_ms(unknown)
        with self.assertRaises(DurationUnavailable):
            read_duration_ms(self.root / "missing.mp3")

    def test_seconds_to_milliseconds(self):
        audio = SimpleNamespace(info=SimpleNamespace(length=61.2346))
        with mock.patch("audiobook_syncer.durations.mutagen.File", return_value=audio):
            self.assertEqual(read_duration_ms("chapter.mp3"), 61235)
            self.assertEqual(MutagenDurationProvider()("chapter.mp3"), 61235)

    def test_library_uses_mutagen_by_default(self):
        book = self.root / "Book"
        book.mkdir()
        (book / "a.mp3").write_bytes(b"")
        (book / "b.mp3").write_bytes(b"\x00" * 4096)
        (book / "sync_map.json").write_text('[{"src": "a", "tgt": "b", "begin": 0, "end": 10}]', encoding="utf-8")

        library = AudiobookLibrary(self.root)
        self.assertIsInstance(library.duration_provider, MutagenDurationProvider)

        with self.assertLogs("audiobook_syncer.durations", level="WARNING"):
            loaded = library.load("Book")
        self.assertEqual(dict(loaded.timeline), {"a.mp3": 0, "b.mp3": 0})
        self.assertEqual(loaded.timeline.total_duration, 0)

if __name__ == '__main__':
    unittest.main()
