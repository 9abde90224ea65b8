import unittest

from audio_chroma.options import (
    DEFAULT_ALGORITHM,
    Algorithm,
    algorithm_names,
    lookup_algorithm,
)


class TestOptionCatalog(unittest.TestCase):
    def test_native_codes_match_chromaprint_constants(self) -> None:
        self.assertEqual(
            [int(member) for member in Algorithm],
            [0, 1, 2, 3, 4],
        )
        self.assertIs(DEFAULT_ALGORITHM, Algorithm.TEST2)

    def test_lookup_is_case_insensitive(self) -> None:
        self.assertIs(lookup_algorithm("test3"), Algorithm.TEST3)
        self.assertIs(lookup_algorithm(" TEST1 "), Algorithm.TEST1)
        self.assertIs(lookup_algorithm(Algorithm.TEST5), Algorithm.TEST5)

    def test_lookup_rejects_unknown_values(self) -> None:
        self.assertIsNone(lookup_algorithm("test9"))
        self.assertIsNone(lookup_algorithm(2))
        self.assertIsNone(lookup_algorithm(None))

    def test_names_are_lower_case_symbols(self) -> None:
        self.assertEqual(algorithm_names(), ["test1", "test2", "test3", "test4", "test5"])


if __name__ == "__main__":
    unittest.main()
