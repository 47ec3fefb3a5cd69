""" Print warnings as a single 'file:line: Category: message' line.

Importing the module replaces the global warning format; the comparison
loop reports failed fits through warnings, so one line per failure keeps
the output of a long run readable.
"""
import os
import warnings


def simplified_format(
        message, category, filename, lineno, line=None):
    to_print = '{:s}:{:d}: {:s}: {:s}\n'.format(
        os.path.basename(filename), lineno, category.__name__, str(message)
    )
    return to_print

warnings.formatwarning = simplified_format
