"""Legal Navigator client core: contract analysis workflow, history, personalization."""

__version__ = "0.3.0"
