"""Shared constants for the debug session host."""

# Bytes read from the PTY master per select() wake-up.
PTY_READ_SIZE = 4096

# Bytes read from the real terminal per keystroke batch.
STDIN_READ_SIZE = 1024

# Environment variable that makes debugger.lua print uncoloured output, so
# marker lines carry no escape sequences.
NOCOLOR_ENV = "DBG_NOCOLOR"
