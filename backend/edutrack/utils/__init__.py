"""Shared helpers for the EduTrack API."""
