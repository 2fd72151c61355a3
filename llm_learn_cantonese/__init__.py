"""
LLM Learn Cantonese

Practice Cantonese vocabulary through a chat tutor that reads and updates
a personal word list with tool calls.
"""

from . import errors
from . import db
from . import matcher
from . import queries
from . import progress
from . import wordbank
from . import tools
from . import agent

__version__ = "0.1.0"
__all__ = ["errors", "db", "matcher", "queries", "progress", "wordbank", "tools", "agent"]
