"""Dice-driven kart race simulator."""
