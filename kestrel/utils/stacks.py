"""
kestrel.utils.stacks
~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import os.path
import re
from collections import namedtuple

from kestrel.conf import defaults

_coding_re = re.compile(r'coding[:=]\s*([-\w.]+)')

StackFrame = namedtuple('StackFrame', [
    'template_path', 'line', 'column', 'frame_id',
])

# marks the first frame, whose path always differs
_NO_PATH = object()


def read_source(filename):
    """
    Returns the lines of ``filename`` without their line endings, or an
    empty list if the file cannot be read.
    """
    try:
        with open(filename, 'rb') as f:
            source = f.read()
    except (OSError, IOError):
        return []

    encoding = 'utf-8'
    for line in source.splitlines()[:2]:
        # File coding may be specified. Match pattern from PEP-263
        # (http://www.python.org/dev/peps/pep-0263/)
        match = _coding_re.search(line.decode('ascii', 'replace'))
        if match:
            encoding = match.group(1)
            break

    try:
        text = source.decode(encoding, 'replace')
    except LookupError:
        text = source.decode('utf-8', 'replace')
    return text.splitlines()


def get_context_lines(source, lineno, context_lines=defaults.CONTEXT_LINES):
    """
    Returns ``(pre_context, context_line, post_context)`` around the
    1-indexed ``lineno`` of ``source``. Lines before the start or past the
    end of the file are left out, and ``context_line`` is ``None`` when
    ``lineno`` does not point into the file.
    """
    if not source or not lineno or not 1 <= lineno <= len(source):
        # the file may have changed since the frame was recorded
        return [], None, []

    lower_bound = max(1, lineno - context_lines)
    upper_bound = min(lineno + context_lines, len(source))

    pre_context = source[lower_bound - 1:lineno - 1]
    context_line = source[lineno - 1]
    post_context = source[lineno:upper_bound]

    return pre_context, context_line, post_context


def _getitem_from_frame(f_locals, key, default=None):
    """
    f_locals is not guaranteed to have .get(), but it will always
    support __getitem__. Even if it doesnt, we return ``default``.
    """
    try:
        return f_locals[key]
    except Exception:
        return default


def _get_column(tb):
    try:
        positions = list(tb.tb_frame.f_code.co_positions())
        column = positions[tb.tb_lasti // 2][2]
    except (AttributeError, IndexError, TypeError):
        return 0
    if column is None:
        return 0
    return column + 1


def iter_traceback_frames(tb):
    """
    Given a traceback object, yields a ``StackFrame`` for every frame
    that does not contain the ``__traceback_hide__`` local variable,
    innermost frame first.
    """
    tracebacks = []
    while tb:
        # support for __traceback_hide__ which is used by a few libraries
        # to hide internal frames.
        f_locals = getattr(tb.tb_frame, 'f_locals', {})
        if not _getitem_from_frame(f_locals, '__traceback_hide__'):
            tracebacks.append(tb)
        tb = tb.tb_next

    for tb in reversed(tracebacks):
        f_code = tb.tb_frame.f_code
        yield StackFrame(
            template_path=f_code.co_filename,
            line=tb.tb_lineno,
            column=_get_column(tb),
            frame_id=f_code.co_name,
        )


def get_stack_info(frames, one_line=False, reader=read_source):
    """
    Given an ordered sequence of ``StackFrame`` (innermost first), returns
    a list of frame dictionaries that are JSON-ready.

    The innermost frame is labelled with its column since the function
    name is not known for it; the others carry their frame id.
    """
    results = []
    path = _NO_PATH
    source = []
    for index, frame in enumerate(frames):
        if one_line and index:
            break

        template_path, lineno, column, frame_id = frame

        if template_path != path:
            source = reader(template_path) if template_path else []
            path = template_path

        pre_context, context_line, post_context = get_context_lines(
            source, lineno)

        if index == 0:
            function = 'column %s' % (column if column is not None else 0)
        else:
            function = frame_id

        frame_result = {
            'abs_path': template_path,
            'filename': os.path.basename(template_path or '') or template_path,
            'lineno': lineno,
            'colno': column,
            'function': function,
        }
        if context_line is not None:
            frame_result.update({
                'pre_context': pre_context,
                'context_line': context_line,
                'post_context': post_context,
            })

        results.append(frame_result)
    return results
