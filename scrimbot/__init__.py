"""scrimbot: queue, map vote and captain draft coordination for chat scrims."""
