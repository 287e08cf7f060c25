"""Campus expense and study planner."""
