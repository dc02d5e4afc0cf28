"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information, 'exit' to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    def onecmd(self, line):
        """Only a bare command word (exit, help, EOF) is a shell command. Any other line is Lox source, even when it
        starts with one of those words, e.g. "exit = 2;".
        """
        command = line.strip()
        if line == "EOF":  # sent by cmdloop at end of input, also in the middle of a continuation
            return self.do_EOF("")
        if self._tmp_line:
            return self.default(line)
        if not command:
            return self.emptyline()
        if command in ("exit", "help", "EOF"):
            return super().onecmd(command)
        return self.default(line)

    def default(self, line):
        """Executes arbitrary Lox source. Unfinished lines (unclosed braces/parentheses) are buffered."""
        line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

        if add_to_prev:
            self._tmp_line = line
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.error_handler.reset()
            self.sess.run(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically-typed language with closures and classes. Every line \n"
              "you type is run as a program; variables, functions and classes stay defined \n"
              "for the rest of the session.\n\n"
              "Try it out by typing 'var greeting = \"hello\";' and then 'print greeting + \" world\";'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
