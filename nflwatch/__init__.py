"""NFL scores, live play-by-play and game replays in the terminal."""

__version__ = "0.1.0"
