"""MissionHub: shared savings missions for households."""
