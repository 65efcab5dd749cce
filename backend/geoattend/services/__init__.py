"""Attendance verification services."""
