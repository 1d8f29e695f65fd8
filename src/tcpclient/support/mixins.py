import threading


class CommonEqualityMixin(object):
    """
    Equality for value objects: instances of the same class compare equal when their attributes do.
    Subclasses that are used as dictionary keys must still define __hash__.
    """
    local = threading.local()

    def __eq__(self, other):
        if not hasattr(CommonEqualityMixin.local, 'seen'):
            CommonEqualityMixin.local.seen = []
        seen = CommonEqualityMixin.local.seen
        return isinstance(other, self.__class__) and hasattr(other, '__dict__') \
            and self._dicts_equal(other, seen)

    def _dicts_equal(self, other, seen):
        pair = (id(self), id(other))
        if pair in seen:
            raise ValueError("recursive comparison of %s objects" % type(self).__name__)
        seen.append(pair)
        try:
            return self.__dict__ == other.__dict__
        finally:
            seen.pop()

    def __ne__(self, other):
        return not self.__eq__(other)
