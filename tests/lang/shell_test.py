import io
import re
import unittest
from contextlib import redirect_stdout

from ecalc.lang.error import ErrorHandler
from ecalc.lang.session import Session
from ecalc.lang.shell import Shell


def plain(text):
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(fatal=False), Session.SH_FILE))
        self.output = io.StringIO()

    def send(self, line):
        with redirect_stdout(self.output):
            return self.shell.onecmd(line)

    def test_default(self):
        self.send("let x = 2; x + 1")
        self.send("fn sq x = x * x; sq(-3)")
        self.assertEqual("Result: 3\nResult: 9\n", plain(self.output.getvalue()))
        self.assertEqual([], self.shell.sess.results)

    def test_line_continuation(self):
        self.send("(1 +")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        self.send("fn f x = x;")
        self.send("2) * 3")
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertIn("error: ", plain(self.output.getvalue()))

        self.output = io.StringIO()
        self.send("let x = 4;")
        self.send("x / 8")
        self.assertEqual("Result: 0.5\n", plain(self.output.getvalue()))

    def test_errors_are_not_fatal(self):
        self.send("y")
        self.send("1 +")
        self.send("7")

        output = plain(self.output.getvalue())
        self.assertIn("<in>:1:1: error: undefined variable 'y'", output)
        self.assertIn("<in>:1:4: error: expected an expression, found end of input", output)
        self.assertTrue(output.endswith("Result: 7\n"))

    def test_exit(self):
        self.assertTrue(self.send("exit"))
        self.assertTrue(self.send("  exit "))
        self.assertTrue(self.send("EOF"))

    def test_commands_only_on_bare_lines(self):
        cases = {
            "exit(1)": "error: undefined function 'exit'",
            "help + 1": "error: undefined variable 'help'",
            "exit now": "error: unexpected 'now' after end of program",
            "let exit = 2; exit * 3": "Result: 6",
        }
        for case, expected in cases.items():
            self.output = io.StringIO()
            self.assertFalse(self.send(case), case)
            self.assertIn(expected, plain(self.output.getvalue()), case)

    def test_help(self):
        for case in ["help", "?"]:
            self.output = io.StringIO()
            self.assertFalse(self.send(case), case)
            self.assertTrue(self.output.getvalue().startswith("Welcome to the ecalc interpreter!"), case)

    def test_commands_in_continuation(self):
        # inside an unfinished program, "exit" is just more source
        self.send("(1 +")
        self.assertFalse(self.send("exit"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        self.send(")")
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertIn("error: undefined variable 'exit'", plain(self.output.getvalue()))

    def test_emptyline(self):
        self.assertFalse(self.send(""))
        self.assertEqual("", self.output.getvalue())


if __name__ == '__main__':
    unittest.main()
