"""Support library for mining pool software: hashing, difficulty, encodings, locks and TCP helpers."""

__version__ = "1.0.0"