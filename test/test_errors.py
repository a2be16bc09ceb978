import pickle
import unittest

from danube_occurrence.errors import (
    ConfigurationError,
    ParseError,
    ParseFailure,
    TypeMismatchError,
)


class TestErrors(unittest.TestCase):
    def test_parse_error_survives_pickling(self):
        failures = [ParseFailure(row=2, column="year", value="20x1", reason="not an integer")]
        error = ParseError.from_failures("year", failures)

        restored = pickle.loads(pickle.dumps(error))

        self.assertIsInstance(restored, ParseError)
        self.assertEqual(restored.code, "parse")
        self.assertEqual(restored.failures, failures)
        self.assertEqual(str(restored), str(error))

    def test_single_message_errors_survive_pickling(self):
        for error in [ConfigurationError("missing column"), TypeMismatchError("no polygon")]:
            with self.subTest(error=type(error).__name__):
                restored = pickle.loads(pickle.dumps(error))

                self.assertIs(type(restored), type(error))
                self.assertEqual(restored.message, error.message)
                self.assertEqual(restored.code, error.code)

    def test_errors_are_hashable(self):
        errors = {ConfigurationError("a"), ParseError("parse", "b")}

        self.assertEqual(len(errors), 2)

    def test_type_mismatch_is_a_type_error(self):
        self.assertIsInstance(TypeMismatchError("no polygon"), TypeError)
