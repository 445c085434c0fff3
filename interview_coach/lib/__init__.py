"""Core library for the answer-submission gateway."""
