"""
kestrel.events
~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import sys
import traceback
import uuid
from collections import namedtuple
from collections.abc import Mapping
from datetime import datetime, timezone

from kestrel.conf import defaults
from kestrel.context import RequestContext
from kestrel.exceptions import ValidationError
from kestrel.utils.encoding import to_unicode, truncate
from kestrel.utils.stacks import StackFrame, get_stack_info, iter_traceback_frames

__all__ = ('BaseEvent', 'Exception', 'Message', 'ExceptionInfo')


class ExceptionInfo(namedtuple('ExceptionInfo', [
        'message', 'detail', 'type', 'stack_frames', 'stacktrace'])):
    """
    A language neutral description of an error: its message and detail,
    its type name, the frames it was raised through (innermost first) and
    the raw trace text.
    """
    __slots__ = ()

    def __new__(cls, message='', detail='', type='', stack_frames=(),
                stacktrace=''):
        return super(ExceptionInfo, cls).__new__(
            cls, to_unicode(message or ''), to_unicode(detail or ''),
            to_unicode(type or ''),
            [_to_stack_frame(f) for f in stack_frames or ()],
            to_unicode(stacktrace or ''))

    @classmethod
    def from_exc_info(cls, exc_info):
        exc_type, exc_value, exc_traceback = exc_info
        try:
            return cls(
                message=to_unicode(exc_value),
                type=getattr(exc_type, '__name__', '<unknown>'),
                stack_frames=list(iter_traceback_frames(exc_traceback)),
                stacktrace=''.join(traceback.format_exception(
                    exc_type, exc_value, exc_traceback)),
            )
        finally:
            del exc_type, exc_value, exc_traceback


def _to_stack_frame(frame):
    if isinstance(frame, StackFrame):
        return frame
    if isinstance(frame, Mapping):
        return StackFrame(
            template_path=frame.get('template_path'),
            line=frame.get('line'),
            column=frame.get('column'),
            frame_id=frame.get('frame_id'),
        )
    return StackFrame(*frame)


def get_exception_info(exc=None):
    """
    Coerces whatever ``captureException`` was handed into an
    ``ExceptionInfo``: an ``ExceptionInfo``, a mapping of its fields, an
    exception instance, an ``exc_info`` tuple, or ``None``/``True`` for the
    exception currently being handled.
    """
    if exc is None or exc is True:
        exc = sys.exc_info()
        if exc[0] is None:
            raise ValidationError('No exception found')

    if isinstance(exc, ExceptionInfo):
        return exc
    if isinstance(exc, Mapping):
        return ExceptionInfo(**dict(
            (k, v) for k, v in exc.items() if k in ExceptionInfo._fields))
    if isinstance(exc, BaseException):
        return ExceptionInfo.from_exc_info(
            (type(exc), exc, exc.__traceback__))
    if isinstance(exc, tuple) and len(exc) == 3:
        return ExceptionInfo.from_exc_info(exc)
    raise ValidationError('Cannot capture %r as an exception' % (exc,))


def get_http_info(request):
    result = {
        'url': request.url,
        'method': request.method,
        'query_string': request.query_string,
        'headers': request.headers,
        'cookies': request.cookies,
        'data': request.data,
        'env': request.env,
    }
    if request.session:
        result['session'] = request.session
    return result


class BaseEvent(object):
    """
    Builds the payload of one kind of event.

    ``envelope`` holds the configuration every event is stamped with
    (see ``ClientConfig.envelope``).
    """
    def __init__(self, **envelope):
        self.envelope = envelope

    def capture(self, **kwargs):
        return {}

    def decorate(self, data, path='', event_id=None, request=None,
                 user=None, date=None):
        """
        Stamps the common envelope fields onto ``data`` and returns it.
        """
        if request is None:
            request = RequestContext()

        if event_id is None:
            event_id = uuid.uuid4().hex
        else:
            try:
                event_id = uuid.UUID(str(event_id)).hex
            except ValueError:
                raise ValidationError('Invalid event id: %r' % (event_id,))

        if date is None:
            date = datetime.now(timezone.utc)
        elif date.tzinfo is not None:
            date = date.astimezone(timezone.utc)

        envelope = self.envelope
        data.update({
            'event_id': event_id,
            'timestamp': date.strftime('%Y-%m-%dT%H:%M:%S'),
            'logger': envelope.get('logger'),
            'project': envelope.get('project'),
            'server_name': envelope.get('server_name'),
            'platform': envelope.get('platform'),
            'release': envelope.get('release'),
            'environment': envelope.get('environment'),
            'transaction': path or request.url or '',
            'request': get_http_info(request),
            'sdk': {
                'name': envelope.get('sdk_name'),
                'version': envelope.get('sdk_version'),
            },
        })
        if user:
            data['user'] = dict(user)
        return data


class Exception(BaseEvent):
    """
    Exceptions store the following metadata:

    - culprit: the exception message
    - message: the message followed by its detail
    - exception: type ('<type> Error'), value and the stack frames
    - extra: the raw trace and any additional data, when asked for
    """
    name = 'exception'

    def capture(self, exc=None, level='error', one_line_stacktrace=False,
                show_raw_stacktrace=False, strip_tabs=False,
                additional_data=None, **kwargs):
        info = get_exception_info(exc)

        value = ' '.join(part for part in (info.message, info.detail) if part)
        frames = get_stack_info(info.stack_frames, one_line=one_line_stacktrace)

        data = {
            'message': value,
            'level': level,
            'culprit': info.message,
            self.name: {
                'values': [{
                    'type': '%s Error' % (info.type,),
                    'value': value,
                    'stacktrace': {
                        'frames': frames,
                    },
                }],
            },
        }

        extra = {}
        if show_raw_stacktrace and info.stacktrace:
            raw = info.stacktrace.replace('\r', '')
            if strip_tabs:
                raw = raw.replace('\t', '')
            extra['raw_stacktrace'] = raw.split('\n')
        if additional_data:
            extra['additional_data'] = additional_data
        if extra:
            data['extra'] = extra

        return data


class Message(BaseEvent):
    """
    Messages store the following metadata:

    - message: 'My message from %s about %s'
    - params: ('foo', 'bar')
    """
    name = 'sentry.interfaces.Message'

    def capture(self, message, level='info', params=None, **kwargs):
        message = truncate(
            to_unicode(message), defaults.MAX_LENGTH_MESSAGE,
            defaults.MESSAGE_ELLIPSIS)
        data = {
            'message': message,
            'level': level,
        }
        if params:
            data[self.name] = {
                'message': message,
                'params': list(params),
            }
        return data
