"""Block Blast: 8x8 block placement puzzle engine, gymnasium env and pygame front-end."""

__version__ = "0.1.0"
