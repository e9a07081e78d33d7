"""CLI module for RoomBot."""
