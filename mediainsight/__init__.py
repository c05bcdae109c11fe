"""HTTP service exposing the media analysis pipeline."""
