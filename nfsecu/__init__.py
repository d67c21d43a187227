"""NiceFox Secu.

Bootstraps a local pentest toolkit for an AI coding agent:
 - checks Docker is reachable
 - builds the toolkit image if needed and makes sure its container runs
 - installs the PENTEST.md prompt into ~/.nicefox-secu/
 - prints the one line to paste into the agent

Running it again is safe; each stage only acts when something is missing.
"""

__version__ = "0.3.0"
