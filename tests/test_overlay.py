import threading
import unittest

from audio_chroma.errors import ArgumentError, ProtectedKeyError
from audio_chroma.options import HANDLE_KEY, Algorithm
from audio_chroma.overlay import AttributeOverlay


class TestAttributeOverlay(unittest.TestCase):
    def test_stores_independent_copy_of_caller_value(self) -> None:
        overlay = AttributeOverlay()
        tags = ["jazz", "live"]
        overlay["tags"] = tags
        tags.append("bootleg")
        self.assertEqual(overlay["tags"], ["jazz", "live"])

    def test_reads_return_copies(self) -> None:
        overlay = AttributeOverlay()
        overlay.set("meta", {"year": 1959})
        snapshot = overlay.get("meta")
        snapshot["year"] = 2001
        self.assertEqual(overlay["meta"], {"year": 1959})

    def test_get_returns_default_when_absent(self) -> None:
        overlay = AttributeOverlay()
        self.assertIsNone(overlay.get("missing"))
        self.assertEqual(overlay.get("missing", "x"), "x")

    def test_set_overwrites_previous_value(self) -> None:
        overlay = AttributeOverlay()
        overlay["artist"] = "A"
        overlay["artist"] = "B"
        self.assertEqual(overlay["artist"], "B")
        self.assertEqual(len(overlay), 1)

    def test_handle_key_is_protected(self) -> None:
        overlay = AttributeOverlay()
        overlay._bind_handle(0x1000)
        with self.assertRaises(ProtectedKeyError):
            overlay[HANDLE_KEY] = 1
        with self.assertRaises(ProtectedKeyError):
            overlay.update({HANDLE_KEY: 2})
        with self.assertRaises(ProtectedKeyError):
            del overlay[HANDLE_KEY]
        with self.assertRaises(ProtectedKeyError):
            overlay.pop(HANDLE_KEY)
        self.assertEqual(overlay[HANDLE_KEY], 0x1000)

    def test_handle_can_only_be_bound_once(self) -> None:
        overlay = AttributeOverlay()
        overlay._bind_handle(0x1000)
        with self.assertRaises(ProtectedKeyError):
            overlay._bind_handle(0x2000)
        self.assertEqual(overlay[HANDLE_KEY], 0x1000)

    def test_protected_key_rejected_before_binding(self) -> None:
        overlay = AttributeOverlay()
        with self.assertRaises(ProtectedKeyError):
            overlay.set(HANDLE_KEY, 5)
        self.assertNotIn(HANDLE_KEY, overlay)

    def test_clear_keeps_handle_entry(self) -> None:
        overlay = AttributeOverlay()
        overlay._bind_handle(0x1000)
        overlay["a"] = 1
        overlay["b"] = 2
        overlay.clear()
        self.assertEqual(list(overlay), [HANDLE_KEY])

    def test_algorithm_is_cached_and_read_only(self) -> None:
        overlay = AttributeOverlay(Algorithm.TEST4)
        self.assertIs(overlay.algorithm, Algorithm.TEST4)
        with self.assertRaises(AttributeError):
            overlay.algorithm = Algorithm.TEST1  # type: ignore[misc]

    def test_uncopyable_value_is_rejected_with_key_name(self) -> None:
        overlay = AttributeOverlay()
        with self.assertRaises(ArgumentError) as ctx:
            overlay["mutex"] = threading.Lock()
        self.assertIn("mutex", str(ctx.exception))
        self.assertNotIn("mutex", overlay)

    def test_as_dict_is_a_snapshot(self) -> None:
        overlay = AttributeOverlay()
        overlay["list"] = [1]
        snapshot = overlay.as_dict()
        snapshot["list"].append(2)
        self.assertEqual(overlay["list"], [1])


if __name__ == "__main__":
    unittest.main()
