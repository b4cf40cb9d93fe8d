"""
Env command implementation.

Prints the shell export lines for the Go environment.
"""

from govm.cli.utils import load_context
from govm.core.environment import export_lines


def run(args) -> int:
    """
    Run the env command.

    Output is meant for `eval "$(govm env)"`.
    """
    ctx = load_context(args)
    for line in export_lines(ctx.settings):
        print(line)
    return 0
