"""Interactive installer that points OpenCode at an Azure OpenAI deployment."""

__version__ = "0.1.0"
