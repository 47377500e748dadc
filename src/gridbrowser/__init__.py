"""GridBrowser - a grid of embedded browser panes kept in sync with persisted state."""

__version__ = "0.1.0"
