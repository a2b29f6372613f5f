from pathlib import Path

# Directory where the user is running the CLI from
CWD = Path.cwd()

# Table rendering parameters
DESCRIPTION_WRAP_WIDTH = 60

FILTER_KIND_CONTENT_AWARE = "content-aware"
FILTER_KIND_CLASSIC = "classic"
