# nexus_tcg/engine/errors.py


class GameError(Exception):
    """Rejected action; carries the HTTP status the dispatcher answers with."""

    status = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotInRoom(GameError):
    status = 403

    def __init__(self, message: str = "Not in room"):
        super().__init__(message)


class RoomFull(GameError):
    status = 409

    def __init__(self, message: str = "Room is full"):
        super().__init__(message)


class IllegalAction(GameError):
    status = 400


class InsufficientResource(GameError):
    status = 422

    def __init__(self, message: str = "Not enough dice"):
        super().__init__(message)


class ConflictError(GameError):
    status = 409

    def __init__(self, message: str = "Conflict: room updated concurrently"):
        super().__init__(message)
