"""Handles interactive/command-line mode for the ecalc interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """ecalc interpreter shell."""
    intro = "ecalc interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    COMMANDS = ("help", "?", "exit")  # only recognized as a whole line, outside of a continuation

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def onecmd(self, line):
        """Runs a shell command only for a bare command line (or end of input). Anything else, like "exit(1)" or
        "help + 1", is an ecalc program.
        """
        command = line.strip()
        if command in ("", "EOF") or command in self.COMMANDS and not self._tmp_line:
            return super().onecmd(line)
        return self.default(line)

    def default(self, line):
        """Executes arbitrary ecalc program."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line)
                self.sess.run()

                if self.sess.results:
                    self.sess.pop()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the ecalc interpreter!\n\n"
              "ecalc evaluates arithmetic on floating-point numbers (+, -, *, / and parentheses), \n"
              "with variables and first-order functions.\n\n"
              "Try it out by typing 'let x = 4; x * 2'. Functions are declared with 'fn': \n"
              "'fn double x = x * 2; double(21)'. A line ending with ';' or with unclosed \n"
              "parentheses continues on the next line. Each program starts with no variables \n"
              "or functions defined.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
