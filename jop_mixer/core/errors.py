"""Errors raised by the mixing core."""


class InvalidColourFormat(ValueError):
    """A hex colour string is not 3 or 6 hex digits (optional leading '#')."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f'Invalid hex colour: {value!r}')
