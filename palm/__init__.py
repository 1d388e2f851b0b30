"""Run workflows of AI command-line tools, score their answers, audit and time code."""

__version__ = "1.5.1"