import io
import os
import re
import tempfile
import unittest
from contextlib import redirect_stdout

from ecalc.lang.error import ErrorHandler, GenericException, ParseErrors, UndefinedVariable
from ecalc.lang.session import Session


def plain(text):
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.sess = Session(ErrorHandler(fatal=False), Session.CMD_FILE)
        self.output = io.StringIO()

    def run_sess(self):
        with redirect_stdout(self.output):
            self.sess.run()
        return plain(self.output.getvalue())

    def test_run(self):
        self.sess.add("let x = 2; x * 21")
        self.sess.add("fn half x = x / 2; half(5)")

        self.assertEqual("Result: 42\nResult: 2.5\n", self.run_sess())
        self.assertEqual(42.0, self.sess.pop())
        self.assertEqual(2.5, self.sess.pop())
        self.assertEqual([], self.sess.programs)

    def test_programs_are_independent(self):
        self.sess.add("let x = 2; x")
        self.sess.add("x")

        with self.assertRaises(UndefinedVariable):
            self.run_sess()
        self.assertEqual([2.0], self.sess.results)
        self.assertEqual([], self.sess.programs)

    def test_parse_errors(self):
        self.sess.add("let x = ; x +")
        with self.assertRaises(ParseErrors) as context:
            self.run_sess()
        self.assertEqual(2, len(context.exception.errors))

    def test_eval_error_source(self):
        self.sess.add("let y = 1; x")
        with self.assertRaises(UndefinedVariable) as context:
            self.run_sess()
        self.assertEqual("let y = 1; x", context.exception.source)
        self.assertEqual((11, 12), (context.exception.start, context.exception.end))

    def test_anomaly_warning(self):
        self.sess.add("1 / 0")
        output = self.run_sess()
        self.assertIn("<command>:1:1: warning: program evaluated to inf", output)
        self.assertTrue(output.endswith("Result: inf\n"))

    def test_show_tree(self):
        self.sess.show_tree = True
        self.sess.add("-1")
        self.assertEqual("Negation(nodes=[\n    Number(value=1.0)\n])\nResult: -1\n", self.run_sess())

    def test_add_empty(self):
        should_raise = ["", "  \n "]
        for case in should_raise:
            self.assertRaises(GenericException, self.sess.add, case)

    def test_preprocess_line(self):
        cases = {
            ("1 + 2", ""): ("1 + 2", False),
            ("(1 +", ""): ("(1 +", True),
            ("2)", "(1 +"): ("(1 +\n2)", False),
            ("let x = 1; ", ""): ("let x = 1; ", True),
            ("x", "let x = 1;"): ("let x = 1;\nx", False),
        }
        for (line, prev), expected in cases.items():
            self.assertEqual(expected, Session.preprocess_line(line, prev), line)


class SessionFileTestCase(unittest.TestCase):

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "prog.ec")
            with open(path, "w") as file:
                file.write("fn double x = x * 2;\nlet y = 4;\ndouble(y)\n")

            sess = Session.from_file(ErrorHandler(fatal=False), path)
            output = io.StringIO()
            with redirect_stdout(output):
                sess.run()

        self.assertEqual("Result: 8\n", output.getvalue())
        self.assertEqual(path, sess.error_handler.path)

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "missing.ec")
            with self.assertRaises(GenericException) as context:
                Session.from_file(ErrorHandler(fatal=False), path)
        self.assertEqual(f"'{path}' could not be opened", str(context.exception))


if __name__ == '__main__':
    unittest.main()
