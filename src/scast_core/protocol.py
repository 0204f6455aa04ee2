"""Screencast frame log protocol constants.

Single source of truth for the on-disk record layout, the browser methods the
recorder speaks and the encoder defaults. Keep this file stable. Recorder and
Indexer must remain synchronized.
"""

# Header: [Timestamp(8, float64) | Length(4, uint32)] = 12 bytes
REC_HEADER_FMT = "<dI"
REC_HEADER_LEN = 12

# Largest payload a single header can describe
MAX_PAYLOAD_LEN = 0xFFFFFFFF

# Browser screencast methods (Chrome DevTools Protocol)
METHOD_START_SCREENCAST = "Page.startScreencast"
METHOD_STOP_SCREENCAST = "Page.stopScreencast"
METHOD_FRAME_ACK = "Page.screencastFrameAck"
EVENT_SCREENCAST_FRAME = "Page.screencastFrame"

# start_recording keyword -> wire parameter name
START_PARAM_NAMES = {
    "format": "format",
    "quality": "quality",
    "max_width": "maxWidth",
    "max_height": "maxHeight",
    "every_nth_frame": "everyNthFrame",
}

# Display time of the final frame; there is no next timestamp to diff against.
DEFAULT_LAST_FRAME_DURATION = 0.1
DURATION_DECIMALS = 5

# Concat demuxer byte-range addressing into the log
SUBFILE_URL_FMT = "subfile,,start,{start},end,{end},,:{path}"

# Placeholders replaced by the assembler unless the caller overrides the slot
CONCAT_SCRIPT_PLACEHOLDER = "{concat_script}"
OUTPUT_PLACEHOLDER = "{output}"

DEFAULT_FFMPEG_BINARY = "ffmpeg"
DEFAULT_OUTPUT_PATH = "output.mp4"

# Ordered encoder slots: (key, flag, value). flag None = positional argument.
DEFAULT_FFMPEG_SLOTS = (
    ("ffmpeg_binary", None, DEFAULT_FFMPEG_BINARY),
    ("-y", "-y", None),
    ("-f", "-f", "concat"),
    ("-safe", "-safe", "0"),
    ("-protocol_whitelist", "-protocol_whitelist", "concat,ffconcat,file,subfile,data,crypto,tcp,tls"),
    ("-i", "-i", CONCAT_SCRIPT_PLACEHOLDER),
    ("-fps_mode", "-fps_mode", "vfr"),
    ("-qp", "-qp", "8"),
    ("output", None, OUTPUT_PLACEHOLDER),
)
OUTPUT_SLOT = "output"
INPUT_SLOT = "-i"
BINARY_SLOT = "ffmpeg_binary"
