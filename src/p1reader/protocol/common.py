"""Common constants shared across protocol components.

A P1 telegram is plain text:

    /ISK5\\2M550T-1013          header: '/' + 4 character tag + identifier
                                blank line
    1-0:1.8.1(001234.567*kWh)   data lines: OBIS code + parenthesized value
    ...
    !A1B2                       end marker: '!' + checksum token (not verified)

Every line, including the end marker, is terminated by CR LF.
"""

import re

LINE_TERMINATOR = "\r\n"
HEADER_SEPARATOR = LINE_TERMINATOR * 2  # Blank line between header and body

HEADER_START = "/"
HEADER_TAG_LENGTH = 5  # '/' + 4 character manufacturer tag

END_OF_FRAME_PATTERN = re.compile(r"!\w{4}\r\n")  # End marker with checksum and terminator
END_MARKER_LINE_PATTERN = re.compile(r"!\w{4}")  # End marker as a body line (terminator stripped)

VALUE_START = "("
VALUE_END = ")"

OBIS_CHANNEL_PREFIX_LENGTH = 4  # 'A-B:' prefix in front of the C.D.E groups

DEFAULT_MAX_BUFFER_SIZE = 16384  # Characters buffered before a frame is considered corrupted
DEFAULT_READ_SIZE = 2048  # Bytes requested from the transport per read
