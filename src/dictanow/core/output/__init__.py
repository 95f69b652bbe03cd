"""Transcript delivery to the clipboard and the focused application."""
