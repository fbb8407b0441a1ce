"""
kestrel.conf.defaults
~~~~~~~~~~~~~~~~~~~~~

Represents the default values for all Kestrel settings.

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import socket


# Base URL used when configuring from keys rather than a DSN
ENDPOINT = 'https://sentry.io'

# Seconds to wait on the store API before giving up
TIMEOUT = 2

# Seconds the background worker may spend draining its queue at exit
SHUTDOWN_TIMEOUT = 10

PROTOCOL_VERSION = '7'

SDK_NAME = 'kestrel-python'

# Not all environments have access to socket module, for example Google App Engine
# Need to check to see if the socket module has ``gethostname``, if it doesn't we
# will set it to None and require it passed in to ``Client`` on initializtion.
NAME = socket.gethostname() if hasattr(socket, 'gethostname') else None

LOGGER = 'kestrel'

PLATFORM = 'python'

# The severities understood by the store API, most severe first
LEVELS = ('fatal', 'error', 'warning', 'info', 'debug')

# Messages longer than this are cut down and suffixed with ``MESSAGE_ELLIPSIS``
MAX_LENGTH_MESSAGE = 1000

MESSAGE_ELLIPSIS = '...'

# Source lines captured on each side of a frame's line
CONTEXT_LINES = 2
