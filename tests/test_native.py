import unittest
from unittest.mock import patch

from fake_chromaprint import FakeChromaprint

from audio_chroma import native
from audio_chroma.errors import FingerprintError, LibraryNotFoundError
from audio_chroma.options import Algorithm


class TestFingerprintHelpers(unittest.TestCase):
    def setUp(self) -> None:
        self.lib = FakeChromaprint()

    def test_encode_and_decode(self) -> None:
        encoded = native.encode_fingerprint([1, 2, 3], Algorithm.TEST3, library=self.lib)
        raw, algorithm = native.decode_fingerprint(encoded.decode("ascii"), library=self.lib)
        self.assertEqual(raw, [1, 2, 3])
        self.assertIs(algorithm, Algorithm.TEST3)

    def test_encode_failure_raises(self) -> None:
        with self.assertRaises(FingerprintError):
            native.encode_fingerprint([], Algorithm.TEST2, library=self.lib)

    def test_decode_failure_raises(self) -> None:
        with self.assertRaises(FingerprintError):
            native.decode_fingerprint(b"garbage", library=self.lib)

    def test_decode_unknown_algorithm_raises(self) -> None:
        with self.assertRaises(FingerprintError):
            native.decode_fingerprint(b"9:1,2", library=self.lib)

    def test_hash_and_version(self) -> None:
        self.assertEqual(native.hash_fingerprint([1, 2], library=self.lib), 33)
        self.assertEqual(native.version(library=self.lib), "1.5.1")


class TestLoadLibrary(unittest.TestCase):
    def test_missing_explicit_path_raises(self) -> None:
        with self.assertRaises(LibraryNotFoundError):
            native.load_library("/nonexistent/libchromaprint-missing.so")

    def test_not_found_anywhere_raises(self) -> None:
        with patch.object(native, "_candidate_names", return_value=["/nope/a.so", "/nope/b.so"]):
            with self.assertRaises(LibraryNotFoundError) as ctx:
                native.load_library()
        self.assertIn("/nope/b.so", str(ctx.exception))

    def test_environment_override_is_tried_first(self) -> None:
        with patch.dict("os.environ", {native.LIBRARY_ENV: "/opt/chroma/libchromaprint.so"}):
            names = native._candidate_names()
        self.assertEqual(names[0], "/opt/chroma/libchromaprint.so")

    def test_loaded_library_is_cached(self) -> None:
        sentinel = native.ChromaprintLibrary(ffi=None, lib=None, path="/cached.so")  # type: ignore[arg-type]
        with patch.dict(native._LOADED, {"/cached.so": sentinel}):
            self.assertIs(native.load_library("/cached.so"), sentinel)


if __name__ == "__main__":
    unittest.main()
