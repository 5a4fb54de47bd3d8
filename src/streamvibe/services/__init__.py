"""Service layer for StreamVibe: upload, playback, view accounting, and ownership."""
