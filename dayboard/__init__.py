"""Dayboard - placement and ranking engine for a personal day planner."""
