""" Defaults for the stompwire package. Every value can be overridden with
    a ``STOMPWIRE_*`` environment variable; note that changes to the
    environment will be ignored unless they are made prior to the first
    import of this module.
"""

import os


default_port = 61613


def get(name, default=None, cast=str):
    """ Return the value of the ``STOMPWIRE_<NAME>`` environment variable,
        converted with *cast*, or *default* if the variable is not set.
        A value that cannot be converted raises ValueError naming the
        variable, rather than silently falling back to the default.
    """

    variable = 'STOMPWIRE_' + name.upper()

    try:
        value = os.environ[variable]
    except KeyError:
        return default

    try:
        return cast(value)
    except ValueError:
        raise ValueError('invalid value for %s: %r' % (variable, value))



def _versions(value):
    versions = list()
    for version in value.split(','):
        version = version.strip()
        if version:
            versions.append(version)
    return tuple(versions)


# Default time, in seconds, to wait for a receipt or a CONNECTED frame.
timeout = get('timeout', 5.0, float)

# How long each background read waits for a frame before checking whether
# the connection is shutting down.
poll_interval = get('poll', 1.0, float)

# Size of each read from the underlying stream.
chunk_size = get('chunk', 65536, int)

# Protocol versions offered in the CONNECT frame.
versions = get('versions', ('1.0', '1.1', '1.2'), _versions)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
