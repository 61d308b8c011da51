"""docshelf - organize documents onto shelves and folders by embedding similarity."""

__version__ = "0.1.0"
