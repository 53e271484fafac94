from __future__ import annotations


ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ROOM_CREATE_FAILED = "ROOM_CREATE_FAILED"
NAME_REQUIRED = "NAME_REQUIRED"
NOT_HOST = "NOT_HOST"
NOT_IN_ROOM = "NOT_IN_ROOM"
NOT_IN_LOBBY = "NOT_IN_LOBBY"
NOT_IN_DRAFT = "NOT_IN_DRAFT"
NOT_IN_REVEAL = "NOT_IN_REVEAL"
NOT_IN_VOTING = "NOT_IN_VOTING"
NOT_IN_RESULTS = "NOT_IN_RESULTS"
INVALID_MODE = "INVALID_MODE"
NO_MATCHUP = "NO_MATCHUP"
INVALID_PICK = "INVALID_PICK"
INVALID_CHOICE = "INVALID_CHOICE"
CANNOT_VOTE_SELF_MATCHUP = "CANNOT_VOTE_SELF_MATCHUP"
ALREADY_VOTED = "ALREADY_VOTED"


class RoomError(Exception):
    """A rejected room operation. ``code`` is sent back to the caller as-is."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code
