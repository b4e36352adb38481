import pytest


class ScriptedRandom:
    """Random source that replays a fixed list of draws.

    Each randrange/randint call pops the next value and checks it is inside
    the requested range, so a test fails loudly if the draw order changes.
    """

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def _next(self, call, lo, hi):
        if not self.values:
            raise AssertionError('no scripted value left for {}'.format(call))
        value = self.values.pop(0)
        assert lo <= value <= hi, '{} out of range for {}'.format(value, call)
        self.calls.append((call, value))
        return value

    def randrange(self, n):
        return self._next(('randrange', n), 0, n - 1)

    def randint(self, lo, hi):
        return self._next(('randint', lo, hi), lo, hi)


@pytest.fixture
def scripted():
    return ScriptedRandom
