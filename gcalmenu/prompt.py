import re
import sys

from gcalmenu import cli, colors


class Prompter:
    """Free text prompts and numbered menus on the terminal.

    Every call can be cancelled: end of input (Ctrl-D) at any prompt, or
    'q' at a menu.  get_text() reports that as None, the menus as a
    (value, cancelled) pair.  Menu options are (label, value) pairs.
    """

    def __init__(self, read=input):
        self.read = read

    def _read(self):
        try:
            return self.read()
        except EOFError:
            sys.stdout.write('\n')
            return None

    def get_text(self, prompt, default=''):
        if default:
            cli.print_msg(colors.prompt, '%s [%s]: ' % (prompt, default))
        else:
            cli.print_msg(colors.prompt, '%s: ' % prompt)

        val = self._read()
        if val is None:
            return None
        return val.strip() or default

    def _show(self, options, title):
        if title:
            cli.print_msg(colors.heading, title + '\n')
        for n, (label, _) in enumerate(options, 1):
            cli.print_msg(colors.CLR_NRM(), '%3d: %s\n' % (n, label))

    @staticmethod
    def _index(val, count):
        try:
            n = int(val)
        except ValueError:
            return None
        if 1 <= n <= count:
            return n - 1
        return None

    def choose_one(self, options, title=None):
        if not options:
            return None, True

        self._show(options, title)
        while True:
            cli.print_msg(colors.prompt,
                          'Select [1-%d] or [q]uit: ' % len(options))
            val = self._read()
            if val is None or val.strip().lower() == 'q':
                return None, True

            n = self._index(val.strip(), len(options))
            if n is None:
                cli.print_err_msg('Error: invalid input\n')
                continue
            return options[n][1], False

    def choose_many(self, options, title=None):
        if not options:
            return [], True

        self._show(options, title)
        while True:
            cli.print_msg(colors.prompt,
                          'Select one or more [1-%d] separated by spaces '
                          'or commas, or [q]uit: ' % len(options))
            val = self._read()
            if val is None or val.strip().lower() == 'q':
                return [], True

            picked = []
            for token in re.split(r'[\s,]+', val.strip()):
                n = self._index(token, len(options))
                if n is None:
                    picked = None
                    break
                if n not in picked:
                    picked.append(n)

            if not picked:
                cli.print_err_msg('Error: invalid input\n')
                continue
            return [options[n][1] for n in picked], False
