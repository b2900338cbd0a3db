"""Load scopes: client-side discarding of responses that arrive too late."""


class LoadScope:
    """
    Generation counter standing in for an "alive" flag.

    A loader calls `begin()` before awaiting and applies its result only if
    `is_current(token)` still holds afterwards. Starting another load, or
    calling `invalidate()` on teardown, silently orphans earlier tokens.
    Nothing is cancelled on the server.
    """

    def __init__(self):
        self._generation = 0

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def invalidate(self) -> None:
        self._generation += 1
