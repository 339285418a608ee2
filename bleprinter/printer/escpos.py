"""ESC/POS command builder for thermal printers."""


class ESCPOSBuilder:
    """Builder for ESC/POS printer commands."""

    # ESC/POS Command Constants
    ESC = b'\x1b'
    GS = b'\x1d'

    # Initialize printer
    INIT = ESC + b'\x40'  # ESC @

    # Print modes (ESC ! n)
    MODE_NORMAL = 0x00
    MODE_EMPHASIZED = 0x08
    MODE_DOUBLE_HEIGHT = 0x10
    MODE_DOUBLE_WIDTH = 0x20

    # Alignment
    ALIGN_LEFT = ESC + b'\x61\x00'    # ESC a 0
    ALIGN_CENTER = ESC + b'\x61\x01'  # ESC a 1
    ALIGN_RIGHT = ESC + b'\x61\x02'   # ESC a 2

    # Paper control
    CUT_FULL = GS + b'\x56\x00'  # GS V 0 - Full cut
    CUT_PARTIAL = GS + b'\x56\x01'  # GS V 1 - Partial cut
    FEED_LINE = b'\n'

    def __init__(self, width: int = 32, encoding: str = "cp437"):
        """Initialize builder.

        Args:
            width: Character width per line (32 for 58mm BLE printers)
            encoding: Code page used for text
        """
        self.width = width
        self.encoding = encoding
        self._buffer = bytearray()
        self._buffer.extend(self.INIT)

    # Text formatting methods

    def text(self, content: str) -> "ESCPOSBuilder":
        """Add plain text."""
        self._buffer.extend(content.encode(self.encoding, errors="replace"))
        return self

    def textln(self, content: str = "") -> "ESCPOSBuilder":
        """Add text followed by a newline."""
        return self.text(content).newline()

    def newline(self, count: int = 1) -> "ESCPOSBuilder":
        """Add newline(s)."""
        self._buffer.extend(self.FEED_LINE * count)
        return self

    def mode(self, flags: int) -> "ESCPOSBuilder":
        """Select print mode (ESC ! n), combining MODE_* flags."""
        self._buffer.extend(self.ESC + b'\x21' + bytes([flags & 0xff]))
        return self

    def bold(self, on: bool = True) -> "ESCPOSBuilder":
        """Set emphasized mode via ESC !."""
        return self.mode(self.MODE_EMPHASIZED if on else self.MODE_NORMAL)

    def large(self, on: bool = True) -> "ESCPOSBuilder":
        """Set emphasized double height and width."""
        flags = self.MODE_EMPHASIZED | self.MODE_DOUBLE_HEIGHT | self.MODE_DOUBLE_WIDTH
        return self.mode(flags if on else self.MODE_NORMAL)

    def tall(self, on: bool = True) -> "ESCPOSBuilder":
        """Set emphasized double height."""
        flags = self.MODE_EMPHASIZED | self.MODE_DOUBLE_HEIGHT
        return self.mode(flags if on else self.MODE_NORMAL)

    def normal(self) -> "ESCPOSBuilder":
        """Reset to normal text size."""
        return self.mode(self.MODE_NORMAL)

    # Alignment methods

    def align_left(self) -> "ESCPOSBuilder":
        """Set left alignment."""
        self._buffer.extend(self.ALIGN_LEFT)
        return self

    def align_center(self) -> "ESCPOSBuilder":
        """Set center alignment."""
        self._buffer.extend(self.ALIGN_CENTER)
        return self

    # Line formatting

    def line(self, char: str = "-") -> "ESCPOSBuilder":
        """Print a horizontal line."""
        return self.textln(char * self.width)

    def columns(self, left: str, right: str) -> "ESCPOSBuilder":
        """Print ``left`` and ``right`` justified to the line width."""
        return self.textln(justify(left, right, self.width))

    # Paper control

    def cut(self, partial: bool = False) -> "ESCPOSBuilder":
        """Cut the paper."""
        self._buffer.extend(self.CUT_PARTIAL if partial else self.CUT_FULL)
        return self

    # Build output

    def build(self) -> bytes:
        """Build and return the command buffer."""
        return bytes(self._buffer)

    def __bytes__(self) -> bytes:
        """Allow bytes() conversion."""
        return self.build()

    def __len__(self) -> int:
        """Return buffer length."""
        return len(self._buffer)


def justify(left: str, right: str, width: int = 32) -> str:
    """Join two strings with spaces so they span ``width`` columns.

    At least one space is always kept; overflowing content is not truncated.
    """
    spaces = max(1, width - len(left) - len(right))
    return left + " " * spaces + right
