"""Task Tracker - API Schemas."""
