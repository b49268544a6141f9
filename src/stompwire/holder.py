""" A small synchronization helper for handing values from a callback,
    typically an interceptor running on a connection's reader thread, to
    a waiting caller.
"""

import threading


class Holder:
    """ Hold the most recent value passed to :func:`set`, and count how many
        times it has been called. Waiters block on the count rather than on
        the value, so that a None value still counts as an arrival.

        A bound :func:`set` is a ready-made interceptor consumer::

            holder = Holder()
            connection.add_interceptor(for_body_as_string(url, holder.set))
    """

    def __init__(self):
        self.value = None
        self.count = 0
        self.condition = threading.Condition()


    def set(self, value):
        with self.condition:
            self.value = value
            self.count += 1
            self.condition.notify_all()


    def expect(self, count=1, timeout=None):
        """ Block until :func:`set` has been called at least *count* times.
            Return True if it has, or False after *timeout* seconds.
        """

        with self.condition:
            return self.condition.wait_for(lambda: self.count >= count, timeout)


    def get(self, count=1, timeout=None):
        """ Wait as :func:`expect` does and return the held value, which is
            None if the value did not arrive in time.
        """

        if self.expect(count, timeout):
            return self.value

        return None


    def reset(self):
        with self.condition:
            self.value = None
            self.count = 0


# end of class Holder


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
