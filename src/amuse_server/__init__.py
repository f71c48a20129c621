"""Gesture interpretation server for the Amuse immersive music player."""
