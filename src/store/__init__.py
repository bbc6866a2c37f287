"""Dataset and model ownership plus persistence.

This package holds the arena-backed dataset and model units, the model
file serializer, the prediction writer, and the release path.
"""
