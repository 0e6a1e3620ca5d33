"""Clinic appointment booking backend."""
