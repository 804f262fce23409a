"""Move processing helpers.

This package centralizes the turn gate + move application so every move intent,
whatever connection it arrives on, flows through the same ordered checks.
"""
