#!/usr/bin/env python3
import locale
import os
import signal
import sys
from gcalmenu import __doc__ as USAGE
from gcalmenu import __program__, __version__, __author__, colors

from gcalmenu import gcal, prompt, session
from gcalmenu.exceptions import CollaboratorError, WorkflowCancelled

# Required 3rd party libraries
try:
    import gflags
    from oauth2client.clientsecrets import InvalidClientSecretsError
except ImportError as e:
    print("ERROR: Missing module - {}".format(e.args[0]))
    sys.exit(1)

# ** The MIT License **
#
# Copyright (c) 2007 Eric Davis (aka Insanum)
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#

COMMANDS = [('Add new calendar entry', 'add'),
            ('Remove an existing calendar entry', 'remove'),
            ('Edit an existing calendar entry', 'edit'),
            ('View an existing calendar entry', 'view'),
            ('Exit', 'exit')]

# set from --debug
DEBUG = False

# set while the command loop runs a workflow
IN_WORKFLOW = False


def version():
    print(__program__,  __version__,  ' (', __author__,  ')')


def usage(expanded=None):
    print(USAGE % sys.argv[0])
    if expanded:
        print(expanded())


def debug_print(msg):
    if DEBUG:
        print_msg(colors.CLR_YLW(), msg)


def print_err_msg(msg):
    print_msg(colors.error, msg)


def print_msg(color, msg):
    if colors.CLR.use_color:
        msg = str(color) + msg + str(colors.CLR_NRM())
    print(msg, end='')


def define_flags(flags):
    gflags.DEFINE_bool("help", None, "Show this help", flag_values=flags)
    gflags.DEFINE_bool(
            "helpshort", None, "Show command help only", flag_values=flags)
    gflags.DEFINE_bool(
            "version", False, "Show the version and exit", flag_values=flags)
    gflags.DEFINE_string(
            "config_folder", None,
            "Optional directory to load/store all configuration "
            "information", flag_values=flags)
    gflags.DEFINE_bool(
            "includeRc", False,
            "Whether to include ~/.gcalmenurc when using config_folder",
            flag_values=flags)
    gflags.DEFINE_string(
            "client_secret_file", None,
            "OAuth client secret JSON downloaded from the Google API "
            "console (default ~/.gcalmenu_client_secret.json, or "
            "client_secret.json in --config_folder)", flag_values=flags)
    gflags.DEFINE_bool(
            "noauth_local_webserver", True,
            "Paste the authorization code instead of running a local "
            "web server to receive it", flag_values=flags)
    gflags.DEFINE_string(
            "calendar", None,
            "Calendar to use, by name or regex, instead of asking",
            flag_values=flags)
    gflags.DEFINE_integer(
            "upcoming", 10,
            "Number of upcoming events to list at startup, 0 for none",
            lower_bound=0, flag_values=flags)
    gflags.DEFINE_integer(
            "page_size", 10, "Number of search results per page",
            lower_bound=1, upper_bound=2500, flag_values=flags)
    gflags.DEFINE_bool("refresh", False, "Delete and refresh cached data",
                       flag_values=flags)
    gflags.DEFINE_bool(
            "cache", True, "Execute command without using cache",
            flag_values=flags)
    gflags.DEFINE_bool(
            "color", True, "Enable/Disable all color output",
            flag_values=flags)
    gflags.DEFINE_string(
            "color_prompt", "magenta", "Color for prompts", flag_values=flags)
    gflags.DEFINE_string(
            "color_error", "brightred", "Color for errors", flag_values=flags)
    gflags.DEFINE_string(
            "color_success", "green", "Color for completed changes",
            flag_values=flags)
    gflags.DEFINE_string("locale", None, "System locale", flag_values=flags)
    gflags.DEFINE_bool(
            "debug", False, "Trace requests sent to Google",
            flag_values=flags)

    for name in ("color_prompt", "color_error", "color_success"):
        gflags.RegisterValidator(
                name, lambda value: colors.get_color(value) is not None,
                message="must be one of: " + ", ".join(colors.COLOR_NAMES),
                flag_values=flags)


def parse_args(argv=None):
    if argv is None:
        argv = sys.argv

    flags = gflags.FlagValues()
    define_flags(flags)
    flags.UseGnuGetOpt()  # allow mixing of commands and options

    try:
        if os.path.exists(os.path.expanduser('~/.gcalmenurc')):
            # We want .gcalmenurc to be sourced before any other --flagfile
            # params since we may be told to use a specific config folder, we
            # need to store generated argv in temp variable
            tmpArgv = [argv[0], "--flagfile=~/.gcalmenurc"] + argv[1:]
        else:
            tmpArgv = argv
        args = flags(tmpArgv)

        if flags.config_folder:
            if not os.path.exists(os.path.expanduser(flags.config_folder)):
                os.makedirs(os.path.expanduser(flags.config_folder))
            if os.path.exists(os.path.expanduser("%s/gcalmenurc" %
                                                 flags.config_folder)):
                if not flags.includeRc:
                    tmpArgv = argv + ["--flagfile=%s/gcalmenurc" %
                                      flags.config_folder, ]
                else:
                    tmpArgv += ["--flagfile=%s/gcalmenurc" %
                                flags.config_folder, ]

            flags.Reset()
            args = flags(tmpArgv)
    except gflags.FlagsError as e:
        print_err_msg(str(e) + '\n')
        usage(flags.GetHelp)
        sys.exit(1)

    return args, flags


def print_upcoming(client, count):
    try:
        events = client.upcoming_events('primary', count)
    except CollaboratorError as e:
        print_err_msg('Error: %s\n' % e)
        return

    if not events:
        print_msg(colors.notice, 'No upcoming events found.\n')
        return

    print_msg(colors.heading, 'Upcoming events:\n')
    for event in events:
        print_msg(colors.CLR_NRM(), '%s (%s)\n' % (
            session.event_label(event), session.when_str(event.get('start'))))
    sys.stdout.write('\n')


def command_loop(event_session):
    global IN_WORKFLOW

    while True:
        command, cancelled = event_session.prompter.choose_one(
            COMMANDS, 'Select a command')
        if cancelled or command == 'exit':
            return

        IN_WORKFLOW = True
        try:
            event_session.run(command)
        except WorkflowCancelled as e:
            print_msg(colors.notice, '%s\n' % e)
        finally:
            IN_WORKFLOW = False
        sys.stdout.write('\n')


def SIGINT_handler(signum, frame):
    if IN_WORKFLOW:
        # back to the command menu
        sys.stdout.write('\n')
        raise WorkflowCancelled('Interrupted')

    print_err_msg('Signal caught, bye!\n')
    sys.exit(1)


def main():
    global DEBUG

    args, flags = parse_args()

    if flags.version:
        version()
        sys.exit(0)

    if flags.help:
        usage(flags.GetHelp)
        sys.exit(0)

    if flags.helpshort:
        usage()
        sys.exit(0)

    if not flags.color:
        colors.CLR.use_color = False

    colors.prompt = colors.get_color(flags.color_prompt)
    colors.error = colors.get_color(flags.color_error)
    colors.success = colors.get_color(flags.color_success)

    DEBUG = flags.debug

    if flags.locale:
        try:
            locale.setlocale(locale.LC_ALL, flags.locale)
        except Exception as e:
            print_err_msg("Error: " + str(e) + "!\n"
                          "Check supported locales of your system.\n")
            sys.exit(1)
    else:
        locale.setlocale(locale.LC_ALL, "")

    # pop executable off the stack
    args = args[1:]
    if len(args) > 1:
        print_err_msg('Error: only one command at a time\n')
        sys.exit(1)

    command = args[0] if args else None
    if command == 'help':
        usage()
        sys.exit(0)

    if command and command not in session.EventSession.WORKFLOWS:
        print_err_msg('Error: %s is an invalid command\n' % command)
        sys.exit(1)

    signal.signal(signal.SIGINT, SIGINT_handler)

    gci = gcal.GoogleCalendarInterface(
           config_folder=flags.config_folder,
           client_secret_file=flags.client_secret_file,
           use_cache=flags.cache,
           refresh_cache=flags.refresh,
           noauth_local_webserver=flags.noauth_local_webserver,
           page_size=flags.page_size)

    try:
        gci.connect()
    except InvalidClientSecretsError as e:
        print_err_msg('Error: unable to read client secret file %s: %s\n' %
                      (gci.client_secret_file, e))
        sys.exit(1)

    event_session = session.EventSession(
        gci, prompt.Prompter(), calendar_filter=flags.calendar)

    if command:
        sys.exit(0 if event_session.run(command) else 1)

    if flags.upcoming:
        print_upcoming(gci, flags.upcoming)

    command_loop(event_session)


if __name__ == '__main__':
    main()
