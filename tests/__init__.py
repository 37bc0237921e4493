"""Test helpers and the sample host application."""
