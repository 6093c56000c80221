"""Data models: domain records and result schemas."""
