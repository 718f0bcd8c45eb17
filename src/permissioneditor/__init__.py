"""Desktop editor for incident.json and change.json permission files."""
