"""
Hard errors raised across the engine boundary.

Business-rule exclusions are never exceptions; they are recorded as
reasons inside a successful suggestion.
"""


class NotFoundError(LookupError):
    """A referenced template, user or protocol does not exist"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f'{kind} "{identifier}" not found')
