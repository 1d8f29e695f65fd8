class IOResult:
    """
    The outcome of a send or receive. A result is either successful, carrying the payload, or failed,
    carrying the error. A failed receive still carries whatever bytes arrived before the error.

    >>> IOResult.success(b'abc').ok
    True
    >>> IOResult.failure(OSError('reset'), b'ab').value
    b'ab'
    """

    def __init__(self, value=b'', error: BaseException = None):
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value=b''):
        return cls(value)

    @classmethod
    def failure(cls, error: BaseException, value=b''):
        return cls(value, error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        """ returns the value, or raises the error when this result failed. """
        if self.error is not None:
            raise self.error
        return self.value

    def map(self, fn):
        """ applies fn to the value, keeping the error. """
        return IOResult(fn(self.value), self.error)

    def __bool__(self):
        return self.ok

    def __eq__(self, other):
        return isinstance(other, IOResult) and self.value == other.value and self.error is other.error

    def __hash__(self):
        return hash((self.value, id(self.error)))

    def __repr__(self):
        if self.ok:
            return "IOResult.success(%r)" % (self.value,)
        return "IOResult.failure(%r, %r)" % (self.error, self.value)
