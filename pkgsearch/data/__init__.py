"""
Query side of the package index.

This package is responsible for:
* Lazily fetching and opening the index snapshot exactly once per process.
* Answering ranked name searches against the opened snapshot.
"""
