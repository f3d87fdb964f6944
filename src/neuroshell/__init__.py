"""NeuroShell: a command interpreter for scripted LLM conversations."""

__version__ = "0.1.0"
