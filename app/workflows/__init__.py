"""Durable renewal reminder workflow: schedule, engine, host and dispatcher."""
