"""
Centralised signaling exceptions.

Every failure in the relay is scoped to one connection or one message.
Handlers raise one of these; the room router catches SignalingError at the
dispatch boundary and replies to the sender with {"type": "error", "message": detail}.
Nothing here is ever fatal to the process, and nothing is retried.
"""


class SignalingError(Exception):
    def __init__(self, detail: str = "Signaling error"):
        super().__init__(detail)
        self.detail = detail


class MalformedMessageError(SignalingError):
    """The frame could not be parsed into a message record."""

    def __init__(self, detail: str = "Invalid JSON message."):
        super().__init__(detail)


class ProtocolViolationError(SignalingError):
    """A required field is missing or the peer is in the wrong state."""


class RoutingError(SignalingError):
    """The relay target is unknown, not in the sender's room, or not open."""

    def __init__(self, target_peer_id: str):
        super().__init__(f"Target peer {target_peer_id} not found or not available.")
        self.target_peer_id = target_peer_id


class UnknownMessageTypeError(SignalingError):
    def __init__(self, message_type: str):
        super().__init__(f"Unknown message type: {message_type}")
        self.message_type = message_type


class RoomIdRequiredException(ProtocolViolationError):
    def __init__(self):
        super().__init__("Room ID is required.")


class InvalidRoomIdException(ProtocolViolationError):
    def __init__(self, max_length: int):
        super().__init__(f"Room ID must be a string of 1 to {max_length} characters.")


class TargetPeerRequiredException(ProtocolViolationError):
    def __init__(self):
        super().__init__("Signaling message requires a targetPeerId.")


class NotInRoomException(ProtocolViolationError):
    def __init__(self):
        super().__init__("You are not in a valid room to send signaling data.")
