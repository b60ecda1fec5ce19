"""Local HTTP surface for the scoreboard engine."""
