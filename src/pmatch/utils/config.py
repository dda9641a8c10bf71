"""
Configuration constants to replace magic strings throughout pmatch
"""

# Constraint form markers (recognized by surface syntax, payload follows)
WHEN_MARKER = ":when"
LET_MARKER = ":let"
WHILE_MARKER = ":while"
CONSTRAINT_MARKERS = (WHEN_MARKER, LET_MARKER, WHILE_MARKER)
MARKER_PREFIX = ":"

# Edge direction values (relative to the node an edge is traversed from)
DIRECTION_OUT = "out"
DIRECTION_IN = "in"

# Hidden variables enumerate anonymous component starts; '#' never occurs in
# a pattern identifier, so they cannot collide with declared names
HIDDEN_NAME_PREFIX = "#"

# Frontend
GRAMMAR_FILE = "grammar.lark"
GRAMMAR_START = "token"

# Diagnostics
PATTERN_SOURCE_NAME = "<pattern>"
TOKEN_SEPARATOR = " "

# Error codes
E_MALFORMED_TOKEN = "P0001"
E_DUPLICATE_NAME = "P0002"
E_NAMED_EDGE = "P0003"
E_ARGUMENT_EDGE = "P0004"
E_AMBIGUOUS_CHAIN = "P0005"
E_NO_BACKEND = "P0006"
E_EDGE_DIRECTION = "P0007"
E_UNBOUND_FORM_NAME = "P0008"

# Environment variables
ENV_DUMP_PLAN = "PMATCH_DUMP_PLAN"
ENV_COLOR = "PMATCH_COLOR"
ENV_NO_COLOR = "NO_COLOR"
