"""Slot generation and availability rules."""
