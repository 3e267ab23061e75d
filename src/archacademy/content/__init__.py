"""Bundled lesson, vocabulary, sketching and station content."""
