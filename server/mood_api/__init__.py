"""Mood tracking API: voice/text emotion analysis and mood record analytics."""
