"""
Core package for the media analysis pipeline.

This package contains modular components used by the HTTP entrypoint to
classify uploaded media, extract audio from video, transcribe and translate
it with Gemini, and analyse the transcript for emotion, sentiment, intent
and a summary.
"""
