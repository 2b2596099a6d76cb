from enum import Enum


class ControllerState(Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class IconKind(Enum):
    SYMBOLIC = "symbolic"
    LITERAL = "literal"
